"""Base abstraction for the key/value table store."""
from abc import ABC, abstractmethod

from ..replication.schema import TableRecord


class KeyValueStore(ABC):
    """Abstract key/value store holding switch table state.

    Implementations only need keyed reads, key enumeration and
    whole-record writes. Transport errors propagate unmodified.
    """

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every key known to the store."""
        pass

    @abstractmethod
    def get(self, key: str) -> list[tuple[str, str]]:
        """Return the ordered (field, value) pairs for a key, empty if unknown."""
        pass

    @abstractmethod
    def apply(self, record: TableRecord) -> None:
        """Apply a SET or DEL record."""
        pass

    def apply_all(self, records: list[TableRecord]) -> None:
        """Apply records in order."""
        for record in records:
            self.apply(record)
