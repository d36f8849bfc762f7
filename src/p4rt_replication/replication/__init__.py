"""Packet replication table translation and reconciliation.

Usage:
    from p4rt_replication.replication import (
        PacketReplicationEntry, Replica, UpdateGenerator, UpdateType,
    )

    entry = PacketReplicationEntry.multicast_group(
        7, (Replica("Ethernet0", 0), Replica("Ethernet4", 1))
    )
    record = UpdateGenerator().build(entry, UpdateType.INSERT)
    # record.key == "REPLICATION_IP_MULTICAST_TABLE:0x7"
"""

from .schema import (
    UpdateType,
    TableOperation,
    EntryKind,
    Replica,
    MulticastGroupEntry,
    PacketReplicationEntry,
    TableRecord,
    Discrepancy,
    DiscrepancyKind,
    ReconciliationReport,
    as_multicast_group,
)
from .errors import ReplicationError, InvalidInputError, InvalidArgumentError
from .codec import (
    DEFAULT_TABLE_NAME,
    REPLICA_FIELD_VALUE,
    table_prefix,
    strip_table_name,
    encode_table_key,
    decode_table_key,
    encode_replica_field,
    decode_replica_field,
    replica_identifier,
)
from .generator import UpdateGenerator
from .loader import TableLoader
from .compare import ReconciliationEngine, compare_entries, summarize_discrepancies

__all__ = [
    # Schema classes
    "UpdateType",
    "TableOperation",
    "EntryKind",
    "Replica",
    "MulticastGroupEntry",
    "PacketReplicationEntry",
    "TableRecord",
    "Discrepancy",
    "DiscrepancyKind",
    "ReconciliationReport",
    "as_multicast_group",
    # Errors
    "ReplicationError",
    "InvalidInputError",
    "InvalidArgumentError",
    # Key codec
    "DEFAULT_TABLE_NAME",
    "REPLICA_FIELD_VALUE",
    "table_prefix",
    "strip_table_name",
    "encode_table_key",
    "decode_table_key",
    "encode_replica_field",
    "decode_replica_field",
    "replica_identifier",
    # Components
    "UpdateGenerator",
    "TableLoader",
    "ReconciliationEngine",
    "compare_entries",
    "summarize_discrepancies",
]
