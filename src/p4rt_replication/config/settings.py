"""Settings loaded from YAML with environment overrides."""
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from ..replication.codec import DEFAULT_TABLE_NAME

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "replication.yaml"


@dataclass
class ReplicationSettings:
    """Runtime settings for table access.

    ```yaml
    table_name: REPLICATION_IP_MULTICAST_TABLE
    retry_attempts: 3
    retry_min_wait: 1
    retry_max_wait: 10
    ```
    """
    table_name: str = DEFAULT_TABLE_NAME
    retry_attempts: int = 3
    retry_min_wait: float = 1
    retry_max_wait: float = 10

    @classmethod
    def from_dict(cls, data: dict) -> "ReplicationSettings":
        """
        Build settings from a parsed YAML mapping.

        Raises:
            ValueError: On unknown settings or values of the wrong type
        """
        expected = {f.name: f.type for f in fields(cls)}
        unknown = set(data) - set(expected)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        checked = {
            name: _check_type(name, value, expected[name])
            for name, value in data.items()
        }
        settings = cls(**checked)
        if settings.retry_attempts < 1:
            raise ValueError("Setting retry_attempts must be at least 1")
        return settings


def _check_type(name: str, value, expected: type):
    """Return value as the setting's type, or raise ValueError naming it."""
    # bool is an int subclass, but never a valid setting value
    if isinstance(value, bool):
        raise ValueError(f"Setting {name} must be {expected.__name__}, got {value!r}")
    if expected is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, expected):
        raise ValueError(f"Setting {name} must be {expected.__name__}, got {value!r}")
    return value


def find_settings_file() -> Optional[Path]:
    """Find replication.yaml in the usual locations."""
    search_paths = [
        Path.cwd() / "configs" / SETTINGS_FILENAME,
        Path.cwd() / SETTINGS_FILENAME,
        Path.home() / ".config" / "p4rt-replication" / SETTINGS_FILENAME,
    ]

    for path in search_paths:
        if path.exists():
            return path
    return None


def load_settings(path: Optional[str | Path] = None) -> ReplicationSettings:
    """
    Load settings from YAML, then apply environment overrides.

    Args:
        path: Explicit settings file; searched for when omitted

    Returns:
        ReplicationSettings (defaults when no file is found)

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file contains unknown or malformed settings
    """
    if path is not None:
        settings_path = Path(path)
        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {settings_path}")
    else:
        settings_path = find_settings_file()

    data: dict = {}
    if settings_path is not None:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {settings_path} must be a mapping")
        logger.debug(f"Loaded settings from {settings_path}")

    settings = ReplicationSettings.from_dict(data)

    # Environment overrides
    table_name = os.environ.get("P4RT_REPLICATION_TABLE")
    if table_name:
        settings.table_name = table_name
    retries = os.environ.get("P4RT_REPLICATION_RETRIES")
    if retries:
        settings.retry_attempts = int(retries)

    return settings
