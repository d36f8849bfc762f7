"""Reconciliation engine for packet replication entries.

Compares two independently obtained views of the table (for example the
App DB and the P4RT cache) and reports every divergence.
"""
import logging
from typing import Iterable

from ..utils.logging_config import timed
from .codec import replica_identifier
from .schema import (
    Discrepancy,
    DiscrepancyKind,
    EntryLike,
    MulticastGroupEntry,
    ReconciliationReport,
    as_multicast_group,
)

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Find differences between two packet replication entry collections."""

    def __init__(self, source_a: str = "A", source_b: str = "B"):
        """
        Args:
            source_a: Label of the first collection in messages
            source_b: Label of the second collection in messages
        """
        self.source_a = source_a
        self.source_b = source_b

    def compare(
        self,
        entries_a: Iterable[EntryLike],
        entries_b: Iterable[EntryLike]
    ) -> list[str]:
        """Return one message per discrepancy; empty when both sides agree."""
        return [d.message for d in self.find_discrepancies(entries_a, entries_b)]

    def report(
        self,
        entries_a: Iterable[EntryLike],
        entries_b: Iterable[EntryLike]
    ) -> ReconciliationReport:
        """Return a ReconciliationReport for the two collections."""
        return ReconciliationReport(
            source_a=self.source_a,
            source_b=self.source_b,
            discrepancies=self.find_discrepancies(entries_a, entries_b),
        )

    @timed("compare")
    def find_discrepancies(
        self,
        entries_a: Iterable[EntryLike],
        entries_b: Iterable[EntryLike]
    ) -> list[Discrepancy]:
        """
        Compare two entry collections.

        Groups are visited in ascending group id order: first every group
        of A (missing groups and replica differences), then the groups only
        B has. A repeated group id within one collection keeps the last one.

        Returns:
            Discrepancies in report order
        """
        map_a = _group_map(entries_a)
        map_b = _group_map(entries_b)

        result: list[Discrepancy] = []

        for group_id in sorted(map_a):
            if group_id not in map_b:
                result.append(Discrepancy(
                    kind=DiscrepancyKind.MISSING_GROUP,
                    missing_from=self.source_b,
                    group_id=group_id,
                ))
                continue
            result.extend(self._diff_group(map_a[group_id], map_b[group_id]))

        # Shared groups were already compared above
        for group_id in sorted(map_b):
            if group_id not in map_a:
                result.append(Discrepancy(
                    kind=DiscrepancyKind.MISSING_GROUP,
                    missing_from=self.source_a,
                    group_id=group_id,
                ))

        if result:
            logger.info(
                f"Found {len(result)} discrepancies between "
                f"{self.source_a} and {self.source_b}"
            )
        return result

    def _diff_group(
        self,
        group_a: MulticastGroupEntry,
        group_b: MulticastGroupEntry
    ) -> list[Discrepancy]:
        """Replica differences for a group present on both sides."""
        replicas_a = {replica_identifier(r) for r in group_a.replicas}
        replicas_b = {replica_identifier(r) for r in group_b.replicas}

        changes = [
            Discrepancy(
                kind=DiscrepancyKind.MISSING_REPLICA,
                missing_from=self.source_b,
                group_id=group_a.group_id,
                replica=replica,
            )
            for replica in sorted(replicas_a - replicas_b)
        ]
        changes.extend(
            Discrepancy(
                kind=DiscrepancyKind.MISSING_REPLICA,
                missing_from=self.source_a,
                group_id=group_a.group_id,
                replica=replica,
            )
            for replica in sorted(replicas_b - replicas_a)
        )
        return changes


def _group_map(entries: Iterable[EntryLike]) -> dict[int, MulticastGroupEntry]:
    groups = {}
    for entry in entries:
        group = as_multicast_group(entry)
        groups[group.group_id] = group  # last write wins
    return groups


def compare_entries(
    entries_a: Iterable[EntryLike],
    entries_b: Iterable[EntryLike],
    source_a: str = "A",
    source_b: str = "B",
) -> list[str]:
    """Shortcut for ``ReconciliationEngine(source_a, source_b).compare(...)``."""
    return ReconciliationEngine(source_a, source_b).compare(entries_a, entries_b)


def summarize_discrepancies(messages: list[str], max_lines: int = 0) -> str:
    """
    Create a human-readable summary of a reconciliation run.

    Args:
        messages: Discrepancy messages
        max_lines: Show at most this many messages (0 shows all)
    """
    if not messages:
        return "No discrepancies - both views agree"

    lines = [f"Discrepancies found ({len(messages)} total):"]
    shown = messages[:max_lines] if max_lines > 0 else messages
    for message in shown:
        lines.append(f"  - {message}")
    if len(shown) < len(messages):
        lines.append(f"  ... and {len(messages) - len(shown)} more")
    return "\n".join(lines)
