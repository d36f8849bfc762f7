#!/usr/bin/env python3
"""Command line tool for the packet replication table.

Usage:
    p4rt-replication check APP_DB_SNAPSHOT CACHE_SNAPSHOT
    p4rt-replication encode --group-id 7 --replica Ethernet0:0 --replica Ethernet4:1
    p4rt-replication dump SNAPSHOT

Environment variables:
    P4RT_REPLICATION_TABLE      Override the table name
    P4RT_REPLICATION_LOG_LEVEL  Log level when --log-file is used
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from .config.settings import load_settings
from .manager import ReplicationTableManager
from .replication.compare import summarize_discrepancies
from .replication.errors import ReplicationError
from .replication.generator import UpdateGenerator
from .replication.loader import TableLoader
from .replication.schema import PacketReplicationEntry, Replica, UpdateType
from .store.snapshot import SnapshotStore
from .utils.logging_config import global_stats, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DISCREPANCIES = 1
EXIT_ERROR = 2


def parse_replica(text: str) -> Replica:
    """Parse ``PORT:INSTANCE`` (instance in decimal, default 0)."""
    port, sep, instance = text.rpartition(":")
    if not sep:
        return Replica(port=text)
    try:
        return Replica(port=port, instance=int(instance))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid replica '{text}', expected PORT:INSTANCE"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p4rt-replication",
        description="Translate and reconcile the packet replication table",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="Settings file (default: search for replication.yaml)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write a rotating debug log to this file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Compare an App DB snapshot with a cache snapshot")
    check.add_argument("app_db", type=Path, help="App DB snapshot (YAML)")
    check.add_argument("cache", type=Path, help="Cache snapshot (YAML)")

    encode = sub.add_parser("encode", help="Print the table record for an entry")
    encode.add_argument("--group-id", type=int, required=True)
    encode.add_argument(
        "--replica",
        type=parse_replica,
        action="append",
        default=[],
        help="Replica as PORT:INSTANCE (repeatable)",
    )
    op = encode.add_mutually_exclusive_group()
    op.add_argument("--modify", action="store_true", help="Encode a modify")
    op.add_argument("--delete", action="store_true", help="Encode a delete")

    dump = sub.add_parser("dump", help="Print the entries decoded from a snapshot")
    dump.add_argument("snapshot", type=Path, help="Snapshot (YAML)")

    return parser


def _loader(store, settings) -> TableLoader:
    return TableLoader(
        store,
        table_name=settings.table_name,
        retry_attempts=settings.retry_attempts,
        retry_min_wait=settings.retry_min_wait,
        retry_max_wait=settings.retry_max_wait,
    )


def _check(args, settings) -> int:
    manager = ReplicationTableManager(SnapshotStore(args.app_db), settings)
    cache_loader = _loader(SnapshotStore(args.cache), settings)

    report = manager.verify(cache_loader.load_all())
    for message in report.messages:
        print(message)
    logger.info(summarize_discrepancies(report.messages))
    return EXIT_OK if report.in_sync else EXIT_DISCREPANCIES


def _encode(args, settings) -> int:
    if args.delete:
        update_type = UpdateType.DELETE
    elif args.modify:
        update_type = UpdateType.MODIFY
    else:
        update_type = UpdateType.INSERT

    entry = PacketReplicationEntry.multicast_group(args.group_id, tuple(args.replica))
    record = UpdateGenerator(settings.table_name).build(entry, update_type)
    print(yaml.safe_dump(record.to_dict(), default_flow_style=False, sort_keys=False), end="")
    return EXIT_OK


def _dump(args, settings) -> int:
    loader = _loader(SnapshotStore(args.snapshot), settings)
    groups = {}
    for entry in loader.load_all():
        groups[entry.group_id] = [
            {"port": r.port, "instance": r.instance}
            for r in entry.multicast_group_entry.replicas
        ]
    print(yaml.safe_dump({"multicast_groups": groups}, default_flow_style=False), end="")
    return EXIT_OK


COMMANDS = {
    "check": _check,
    "encode": _encode,
    "dump": _dump,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.log_file:
        setup_logging(args.log_file)
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(args.settings)
        return COMMANDS[args.command](args, settings)
    except (FileNotFoundError, ValueError, ReplicationError) as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if args.verbose:
            print(global_stats.summary(), file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
