"""Update generator for packet replication table records.

Turns an entry and a requested update type into the table record that
the store should apply.
"""
import logging
from typing import Iterable

from .codec import (
    DEFAULT_TABLE_NAME,
    REPLICA_FIELD_VALUE,
    encode_replica_field,
    encode_table_key,
)
from .errors import InvalidArgumentError
from .schema import (
    EntryLike,
    TableOperation,
    TableRecord,
    UpdateType,
    as_multicast_group,
)

logger = logging.getLogger(__name__)

SUPPORTED_UPDATE_TYPES = (UpdateType.INSERT, UpdateType.MODIFY, UpdateType.DELETE)


class UpdateGenerator:
    """Generate table records from packet replication entries."""

    def __init__(self, table_name: str = DEFAULT_TABLE_NAME):
        self.table_name = table_name

    def key_for(self, entry: EntryLike) -> str:
        """Table key for an entry."""
        group = as_multicast_group(entry)
        return encode_table_key(group.group_id, self.table_name)

    def build(self, entry: EntryLike, update_type: UpdateType) -> TableRecord:
        """
        Build the table record for a single update.

        Insert and modify produce the same SET record carrying the full
        replica set; the store replaces all fields of the key.

        Args:
            entry: Entry to translate
            update_type: INSERT, MODIFY or DELETE

        Returns:
            TableRecord to apply

        Raises:
            InvalidArgumentError: If the update type is not supported
        """
        update_type = self.check(update_type)
        logger.debug(f"{update_type.value} packet replication entry: {entry!r}")

        if update_type == UpdateType.DELETE:
            return TableRecord(
                key=self.key_for(entry),
                operation=TableOperation.DEL,
            )
        return self._build_set(entry)

    def check(self, update_type: UpdateType) -> UpdateType:
        """
        Normalize and validate an update type.

        Raises:
            InvalidArgumentError: If the update type is not INSERT, MODIFY or DELETE
        """
        try:
            normalized = UpdateType(update_type)
        except ValueError:
            raise InvalidArgumentError(
                f"Unsupported update type: {update_type!r}"
            ) from None
        if normalized not in SUPPORTED_UPDATE_TYPES:
            raise InvalidArgumentError(f"Unsupported update type: {normalized.value}")
        return normalized

    def build_all(
        self,
        entries: Iterable[EntryLike],
        update_type: UpdateType
    ) -> list[TableRecord]:
        """Build records for a batch of entries, in input order."""
        return [self.build(entry, update_type) for entry in entries]

    def _build_set(self, entry: EntryLike) -> TableRecord:
        group = as_multicast_group(entry)

        # (port, instance) is the field name, so duplicate replicas collapse
        fields: dict[str, str] = {}
        for replica in group.replicas:
            field_name = encode_replica_field(replica.port, replica.instance)
            fields.setdefault(field_name, REPLICA_FIELD_VALUE)

        return TableRecord(
            key=encode_table_key(group.group_id, self.table_name),
            operation=TableOperation.SET,
            fields=tuple(fields.items()),
        )
