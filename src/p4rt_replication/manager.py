"""Replication table manager - ties the generator, store and loader together.

Provides a single entry point for:
1. Writing entries to the store as table records
2. Reading the table back as entries
3. Verifying the store against an independently kept cache
"""
import logging
from typing import Iterable, Optional

from .config.settings import ReplicationSettings
from .replication.compare import ReconciliationEngine
from .replication.generator import UpdateGenerator
from .replication.loader import TableLoader
from .replication.schema import (
    EntryLike,
    PacketReplicationEntry,
    ReconciliationReport,
    UpdateType,
)
from .store.base import KeyValueStore
from .utils.logging_config import timed_section

logger = logging.getLogger(__name__)


class ReplicationTableManager:
    """
    Manage the packet replication table of one store.

    Usage:
        manager = ReplicationTableManager(store)
        manager.apply([entry], UpdateType.INSERT)
        report = manager.verify(cache_entries)
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[ReplicationSettings] = None,
        store_label: str = "APP DB",
        cache_label: str = "cache",
    ):
        self.store = store
        self.settings = settings or ReplicationSettings()
        self.generator = UpdateGenerator(self.settings.table_name)
        self.loader = TableLoader(
            store,
            table_name=self.settings.table_name,
            retry_attempts=self.settings.retry_attempts,
            retry_min_wait=self.settings.retry_min_wait,
            retry_max_wait=self.settings.retry_max_wait,
        )
        self.reconciler = ReconciliationEngine(store_label, cache_label)

    def apply(
        self,
        entries: Iterable[EntryLike],
        update_type: UpdateType
    ) -> list[str]:
        """
        Translate entries and apply the records to the store.

        The update type is checked and all records are built before any is
        applied, so an unsupported update type leaves the store untouched,
        even for an empty batch.

        Returns:
            Keys written, in input order

        Raises:
            InvalidArgumentError: If the update type is not supported
        """
        update_type = self.generator.check(update_type)
        records = self.generator.build_all(entries, update_type)
        with timed_section("apply_records", records=len(records)):
            self.store.apply_all(records)
        logger.info(f"Applied {len(records)} {update_type.value} records")
        return [record.key for record in records]

    def load(self) -> list[PacketReplicationEntry]:
        """Read the table back as entries."""
        return self.loader.load_all()

    def verify(self, cache_entries: Iterable[EntryLike]) -> ReconciliationReport:
        """Compare the store's table (A) with the cache (B)."""
        report = self.reconciler.report(self.load(), cache_entries)
        if report.in_sync:
            logger.info("Packet replication table matches the cache")
        else:
            for message in report.messages:
                logger.warning(message)
        return report
