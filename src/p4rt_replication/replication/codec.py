"""Key codec for the packet replication table.

Table keys look like ``REPLICATION_IP_MULTICAST_TABLE:0x7`` and each replica
is stored as a field ``<port>:0x<instance>`` with the placeholder value
``replica``.
"""
import re

from .errors import InvalidInputError
from .schema import Replica

DEFAULT_TABLE_NAME = "REPLICATION_IP_MULTICAST_TABLE"
REPLICA_FIELD_VALUE = "replica"
MAX_U32 = 0xFFFFFFFF

_HEX_RE = re.compile(r"^(?:0[xX])?([0-9a-fA-F]+)$")


def table_prefix(table_name: str = DEFAULT_TABLE_NAME) -> str:
    """Prefix shared by every key of the table."""
    return f"{table_name}:"


def to_hex(value: int) -> str:
    """Render an unsigned 32-bit value as lowercase ``0x`` hex."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInputError(f"Expected an integer, got {value!r}")
    if value < 0 or value > MAX_U32:
        raise InvalidInputError(f"Value {value} is not an unsigned 32-bit integer")
    return f"0x{value:x}"


def parse_hex(text: str) -> int:
    """Parse hex text with an optional ``0x`` prefix into an unsigned 32-bit value."""
    match = _HEX_RE.match(text)
    if not match:
        raise InvalidInputError(f"Invalid hex value '{text}'")
    value = int(match.group(1), 16)
    if value > MAX_U32:
        raise InvalidInputError(f"Hex value '{text}' does not fit in 32 bits")
    return value


def strip_table_name(key: str, table_name: str = DEFAULT_TABLE_NAME) -> str:
    """Return the part of a key that follows the table prefix."""
    prefix = table_prefix(table_name)
    if not key.startswith(prefix):
        raise InvalidInputError(f"Invalid packet replication key '{key}'")
    return key[len(prefix):]


def encode_table_key(group_id: int, table_name: str = DEFAULT_TABLE_NAME) -> str:
    """Build the table key for a multicast group id."""
    return table_prefix(table_name) + to_hex(group_id)


def decode_table_key(key: str, table_name: str = DEFAULT_TABLE_NAME) -> int:
    """Extract the multicast group id from a table key."""
    group_text = strip_table_name(key, table_name)
    try:
        return parse_hex(group_text)
    except InvalidInputError:
        raise InvalidInputError(
            f"Failed to parse multicast group id from key '{key}'"
        ) from None


def encode_replica_field(port: str, instance: int) -> str:
    """Build the field identifier for a replica."""
    return f"{port}:{to_hex(instance)}"


def decode_replica_field(field_name: str) -> Replica:
    """Parse a replica field identifier back into a Replica."""
    port, sep, instance_text = field_name.rpartition(":")
    if not sep:
        raise InvalidInputError(
            f"Unexpected replica port/instance format '{field_name}'"
        )
    try:
        instance = parse_hex(instance_text)
    except InvalidInputError:
        raise InvalidInputError(
            f"Unexpected replica instance value '{instance_text}' "
            f"in field '{field_name}'"
        ) from None
    return Replica(port=port, instance=instance)


def replica_identifier(replica: Replica) -> str:
    """Identifier used in reconciliation messages, e.g. ``Ethernet0_0``."""
    return f"{replica.port}_{replica.instance}"
