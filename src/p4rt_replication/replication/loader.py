"""Table loader for the packet replication table.

Reads every key of the table from a store and rebuilds the entries.
A malformed key or field anywhere aborts the whole load.
"""
import logging
from typing import TYPE_CHECKING, Optional

from ..utils.connection import with_retry
from ..utils.logging_config import timed
from .codec import (
    DEFAULT_TABLE_NAME,
    decode_replica_field,
    decode_table_key,
    encode_table_key,
    table_prefix,
)
from .errors import InvalidInputError
from .schema import PacketReplicationEntry

if TYPE_CHECKING:
    from ..store.base import KeyValueStore

logger = logging.getLogger(__name__)


class TableLoader:
    """Rebuild packet replication entries from raw table records."""

    def __init__(
        self,
        store: "KeyValueStore",
        table_name: str = DEFAULT_TABLE_NAME,
        retry_attempts: int = 3,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10,
    ):
        self.store = store
        self.table_name = table_name
        self._retry = with_retry(
            max_attempts=retry_attempts,
            min_wait=retry_min_wait,
            max_wait=retry_max_wait,
        )

    def keys(self) -> list[str]:
        """Keys in the store that belong to this table."""
        prefix = table_prefix(self.table_name)
        all_keys = self._retry(self.store.keys)()
        return [key for key in all_keys if key.startswith(prefix)]

    @timed("load_table")
    def load_all(self) -> list[PacketReplicationEntry]:
        """
        Load every multicast group in the table.

        Each key is one multicast group; each field of the key is one
        replica. Field values are ignored.

        Returns:
            Entries in store key order

        Raises:
            InvalidInputError: On the first malformed key or field
        """
        entries = []
        for key in self.keys():
            logger.debug(f"Read packet replication entry {key}")
            entries.append(self._load_entry(key))

        logger.info(f"Loaded {len(entries)} multicast groups from {self.table_name}")
        return entries

    def load(self, group_id: int) -> Optional[PacketReplicationEntry]:
        """Load a single group, or None if the table has no such key."""
        key = encode_table_key(group_id, self.table_name)
        if key not in self.keys():
            return None
        return self._load_entry(key)

    def _load_entry(self, key: str) -> PacketReplicationEntry:
        group_id = decode_table_key(key, self.table_name)

        replicas = []
        for field_name, _value in self._retry(self.store.get)(key):
            try:
                replicas.append(decode_replica_field(field_name))
            except InvalidInputError as e:
                raise InvalidInputError(f"{e} (key '{key}')") from None

        return PacketReplicationEntry.multicast_group(group_id, tuple(replicas))
