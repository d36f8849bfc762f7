"""In-memory key/value store."""
import logging

from ..replication.errors import InvalidArgumentError
from ..replication.schema import TableOperation, TableRecord
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryStore(KeyValueStore):
    """Dict-backed store, useful for caches and tests."""

    def __init__(self, data: dict[str, list[tuple[str, str]]] | None = None):
        self._data: dict[str, list[tuple[str, str]]] = {}
        for key, fields in (data or {}).items():
            self._data[key] = _as_pairs(fields)

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def get(self, key: str) -> list[tuple[str, str]]:
        return list(self._data.get(key, []))

    def apply(self, record: TableRecord) -> None:
        if record.operation == TableOperation.SET:
            # SET replaces the whole field set of the key
            self._data[record.key] = list(record.fields)
            logger.debug(f"SET {record.key} ({len(record.fields)} fields)")
        elif record.operation == TableOperation.DEL:
            self._data.pop(record.key, None)
            logger.debug(f"DEL {record.key}")
        else:
            raise InvalidArgumentError(
                f"Unsupported table operation: {record.operation}"
            )

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Snapshot as ``{key: {field: value}}``."""
        return {key: dict(fields) for key, fields in self._data.items()}

    def __len__(self) -> int:
        return len(self._data)


def _as_pairs(fields) -> list[tuple[str, str]]:
    """Normalize a field mapping or pair list into (field, value) pairs."""
    if isinstance(fields, dict):
        items = fields.items()
    else:
        items = fields or []
    return [(str(f), str(v)) for f, v in items]
