"""Key/value store collaborators for the replication table.

This package provides:
- KeyValueStore: interface the loader and manager depend on
- InMemoryStore: dict-backed store
- SnapshotStore: store backed by a YAML table dump
"""

from .base import KeyValueStore
from .memory import InMemoryStore
from .snapshot import SnapshotStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "SnapshotStore",
]
