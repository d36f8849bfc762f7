"""Errors raised by the packet replication translation layer."""


class ReplicationError(Exception):
    """Base class for packet replication errors."""
    pass


class InvalidInputError(ReplicationError, ValueError):
    """Malformed table key, replica field or hex value."""
    pass


class InvalidArgumentError(ReplicationError, ValueError):
    """Unsupported operation requested by the caller."""
    pass
