"""Configuration loading."""
from .settings import ReplicationSettings, load_settings, find_settings_file

__all__ = ["ReplicationSettings", "load_settings", "find_settings_file"]
