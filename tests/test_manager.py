"""Tests for the replication table manager."""
import pytest

from p4rt_replication.config import ReplicationSettings
from p4rt_replication.manager import ReplicationTableManager
from p4rt_replication.replication import (
    InvalidArgumentError,
    PacketReplicationEntry,
    Replica,
    UpdateType,
)
from p4rt_replication.store import InMemoryStore


def group(group_id, *replicas):
    return PacketReplicationEntry.multicast_group(
        group_id, tuple(Replica(port, instance) for port, instance in replicas)
    )


class TestReplicationTableManager:
    """Tests for ReplicationTableManager."""

    @pytest.fixture
    def manager(self):
        return ReplicationTableManager(InMemoryStore())

    def test_apply_insert(self, manager):
        """Inserted entries land in the store and load back."""
        entries = [group(7, ("Ethernet0", 0), ("Ethernet4", 1)), group(8)]

        keys = manager.apply(entries, UpdateType.INSERT)

        assert keys == [
            "REPLICATION_IP_MULTICAST_TABLE:0x7",
            "REPLICATION_IP_MULTICAST_TABLE:0x8",
        ]
        assert manager.load() == entries

    def test_apply_modify_replaces_replicas(self, manager):
        """Modify replaces the full replica set."""
        manager.apply([group(7, ("Ethernet0", 0))], UpdateType.INSERT)

        manager.apply([group(7, ("Ethernet8", 2))], UpdateType.MODIFY)

        assert manager.load() == [group(7, ("Ethernet8", 2))]

    def test_apply_delete(self, manager):
        """Delete removes the group."""
        manager.apply([group(7, ("Ethernet0", 0))], UpdateType.INSERT)

        manager.apply([group(7)], UpdateType.DELETE)

        assert manager.load() == []

    def test_bad_update_type_writes_nothing(self, manager):
        """An unsupported update type leaves the store untouched."""
        with pytest.raises(InvalidArgumentError):
            manager.apply([group(1)], UpdateType.UNSPECIFIED)

        assert manager.store.keys() == []

    def test_empty_batch_unspecified_rejected(self, manager):
        """The update type is checked even when there is nothing to build."""
        with pytest.raises(InvalidArgumentError):
            manager.apply([], UpdateType.UNSPECIFIED)

    def test_empty_batch_unknown_type_rejected(self, manager):
        """Unknown update types raise InvalidArgumentError, not a bare ValueError."""
        with pytest.raises(InvalidArgumentError) as exc:
            manager.apply([], "upsert")

        assert "upsert" in str(exc.value)

    def test_empty_batch_supported_type(self, manager):
        """An empty batch with a supported type writes nothing."""
        assert manager.apply([], UpdateType.DELETE) == []

    def test_apply_accepts_type_value(self, manager):
        """Update types may be passed by value."""
        keys = manager.apply([group(4)], "insert")

        assert keys == ["REPLICATION_IP_MULTICAST_TABLE:0x4"]

    def test_verify_in_sync(self, manager):
        """Store and cache agreeing gives an in-sync report."""
        cache = [group(1, ("Ethernet0", 0))]
        manager.apply(cache, UpdateType.INSERT)

        report = manager.verify(cache)

        assert report.in_sync
        assert report.messages == []

    def test_verify_reports_drift(self, manager):
        """Drift is labelled with APP DB and cache."""
        manager.apply([group(1, ("Ethernet0", 0)), group(2)], UpdateType.INSERT)
        cache = [group(1, ("Ethernet4", 0)), group(3)]

        report = manager.verify(cache)

        assert report.messages == [
            "cache is missing replica Ethernet0_0 for group 1",
            "APP DB is missing replica Ethernet4_0 for group 1",
            "cache is missing multicast group 2",
            "APP DB is missing multicast group 3",
        ]

    def test_settings_table_name(self):
        """The table name from settings is used for keys."""
        manager = ReplicationTableManager(
            InMemoryStore(), ReplicationSettings(table_name="LAB_TABLE")
        )

        keys = manager.apply([group(1)], UpdateType.INSERT)

        assert keys == ["LAB_TABLE:0x1"]
        assert manager.load() == [group(1)]
