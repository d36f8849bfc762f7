"""Schema definitions for packet replication entries.

Defines the protocol-neutral domain entries, the table records exchanged
with the key/value store and the discrepancies reported by reconciliation.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class UpdateType(str, Enum):
    """Requested change for an entry."""
    UNSPECIFIED = "unspecified"
    INSERT = "insert"
    MODIFY = "modify"
    DELETE = "delete"


class TableOperation(str, Enum):
    """Operation tag of a table record."""
    SET = "SET"   # Upsert the full field set
    DEL = "DEL"   # Remove the key


class EntryKind(str, Enum):
    """Kinds of packet replication entries."""
    MULTICAST_GROUP = "multicast_group"


@dataclass(frozen=True)
class Replica:
    """A single (port, instance) output target of a multicast group."""
    port: str
    instance: int = 0


@dataclass(frozen=True)
class MulticastGroupEntry:
    """A multicast group and its replicas."""
    group_id: int
    replicas: tuple[Replica, ...] = ()

    def __post_init__(self):
        # Accept any iterable of replicas, store as a tuple
        object.__setattr__(self, "replicas", tuple(self.replicas))


@dataclass(frozen=True)
class PacketReplicationEntry:
    """Tagged packet replication entry.

    Only the multicast group variant is populated today. Consumers should
    check ``kind`` before reading a variant.
    """
    kind: EntryKind
    multicast_group_entry: Optional[MulticastGroupEntry] = None

    @classmethod
    def multicast_group(
        cls,
        group_id: int,
        replicas: tuple[Replica, ...] = ()
    ) -> "PacketReplicationEntry":
        """Build a multicast group entry."""
        return cls(
            kind=EntryKind.MULTICAST_GROUP,
            multicast_group_entry=MulticastGroupEntry(group_id, replicas),
        )

    @property
    def group_id(self) -> int:
        """Group id of the multicast group variant."""
        return as_multicast_group(self).group_id


EntryLike = Union[PacketReplicationEntry, MulticastGroupEntry]


def as_multicast_group(entry: EntryLike) -> MulticastGroupEntry:
    """Return the multicast group carried by an entry.

    Raises:
        TypeError: If the entry does not carry a multicast group
    """
    if isinstance(entry, MulticastGroupEntry):
        return entry
    if (
        isinstance(entry, PacketReplicationEntry)
        and entry.kind == EntryKind.MULTICAST_GROUP
        and entry.multicast_group_entry is not None
    ):
        return entry.multicast_group_entry
    raise TypeError(f"Not a multicast group entry: {entry!r}")


# --- Table Records ---

@dataclass(frozen=True)
class TableRecord:
    """A key/operation/fields mutation exchanged with the store."""
    key: str
    operation: TableOperation
    fields: tuple[tuple[str, str], ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "fields", tuple((f, v) for f, v in self.fields)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML/JSON output."""
        return {
            "key": self.key,
            "operation": self.operation.value,
            "fields": [[f, v] for f, v in self.fields],
        }


# --- Reconciliation ---

class DiscrepancyKind(str, Enum):
    """Kind of divergence between two entry collections."""
    MISSING_GROUP = "missing_group"
    MISSING_REPLICA = "missing_replica"


@dataclass(frozen=True)
class Discrepancy:
    """A single divergence found by reconciliation."""
    kind: DiscrepancyKind
    missing_from: str
    group_id: int
    replica: Optional[str] = None

    @property
    def message(self) -> str:
        """Human-readable one-line description."""
        if self.kind == DiscrepancyKind.MISSING_GROUP:
            return f"{self.missing_from} is missing multicast group {self.group_id}"
        return (
            f"{self.missing_from} is missing replica {self.replica} "
            f"for group {self.group_id}"
        )

    def __str__(self) -> str:
        return self.message


@dataclass
class ReconciliationReport:
    """Result of comparing two entry collections."""
    source_a: str = "A"
    source_b: str = "B"
    discrepancies: list[Discrepancy] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        """True when both sides agree."""
        return len(self.discrepancies) == 0

    @property
    def messages(self) -> list[str]:
        """Discrepancy messages in report order."""
        return [d.message for d in self.discrepancies]
