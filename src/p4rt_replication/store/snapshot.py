"""YAML snapshot store.

A snapshot file holds one table dump as a mapping of key to fields:

    REPLICATION_IP_MULTICAST_TABLE:0x7:
      "Ethernet0:0x0": replica
      "Ethernet4:0x1": replica
"""
import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

import yaml

from ..replication.errors import InvalidInputError
from .memory import InMemoryStore

logger = logging.getLogger(__name__)


class SnapshotStore(InMemoryStore):
    """Store backed by a YAML snapshot file."""

    def __init__(self, path: Path | str, create: bool = False):
        """
        Load a snapshot file.

        Args:
            path: Snapshot file path
            create: Start empty if the file does not exist

        Raises:
            FileNotFoundError: If the file is missing and create is False
            InvalidInputError: If the file is not a key -> fields mapping
        """
        self.path = Path(path)
        if not self.path.exists():
            if not create:
                raise FileNotFoundError(f"Snapshot not found: {self.path}")
            super().__init__()
            return

        with open(self.path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidInputError(
                f"Snapshot {self.path} must be a mapping of key to fields"
            )
        for key, fields in data.items():
            if fields is not None and not isinstance(fields, (dict, list)):
                raise InvalidInputError(
                    f"Snapshot {self.path}: fields of '{key}' must be a mapping"
                )

        super().__init__({str(k): v for k, v in data.items()})
        logger.debug(f"Loaded snapshot {self.path} ({len(self)} keys)")

    @property
    def checksum(self) -> str:
        """Checksum of the current content."""
        content = json.dumps(self.to_dict(), sort_keys=True)
        return f"sha256:{hashlib.sha256(content.encode()).hexdigest()[:16]}"

    def save(self, path: Optional[Path | str] = None) -> Path:
        """Write the snapshot back to disk."""
        target = Path(path) if path else self.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=True)
        )
        logger.info(f"Saved snapshot {target} ({len(self)} keys, {self.checksum})")
        return target
