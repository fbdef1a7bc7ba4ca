"""
Reconciliation of duplicate resume records.

At most one record should exist per (job, owner) pair. Races and retried
submissions with different content hashes can leave several; the sweep keeps
the record with the highest id (the most recently created) and deletes the
rest.

Two strategies are available:
- "scan": load every record, group in memory, delete the losers in one bulk call.
- "aggregate": let the database find the duplicate pairs and delete per pair
  inside a single transaction, keeping whatever record is newest at delete time.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .database import ResumeRecord, get_session
from .logger import get_logger
from .store import RecordStore

STRATEGIES = ("scan", "aggregate")


@dataclass
class DuplicateGroup:
    job_id: int
    owner_id: int
    removed: int


@dataclass
class ReconciliationSummary:
    processed: int = 0
    removed: int = 0
    details: List[DuplicateGroup] = field(default_factory=list)

    @property
    def affected_groups(self) -> int:
        return len(self.details)

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "removed": self.removed,
            "affected_groups": self.affected_groups,
            "details": [(g.job_id, g.owner_id, g.removed) for g in self.details],
        }


class ReconciliationEngine:
    """Removes duplicate records sharing a (job, owner) pair."""

    def __init__(self, store: RecordStore, strategy: str = "aggregate"):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown reconciliation strategy: {strategy} (expected one of {STRATEGIES})")
        self.store = store
        self.strategy = strategy
        self.logger = store.logger

    def run(self) -> ReconciliationSummary:
        self.logger.debug("Starting duplicate reconciliation", strategy=self.strategy)
        if self.strategy == "scan":
            summary = self._run_scan()
        else:
            summary = self._run_aggregate()

        self.logger.record_reconcile(summary.removed)
        self.logger.info(
            f"Reconciliation complete: {summary.removed} removed from {summary.affected_groups} pairs",
            processed=summary.processed,
            removed=summary.removed,
            affected_groups=summary.affected_groups,
            strategy=self.strategy,
        )
        return summary

    def _run_scan(self) -> ReconciliationSummary:
        records = self.store.list_all()
        summary = ReconciliationSummary(processed=len(records))

        groups: Dict[Tuple[int, int], List[ResumeRecord]] = defaultdict(list)
        for record in records:
            groups[(record.job_id, record.owner_id)].append(record)

        to_delete: List[ResumeRecord] = []
        for (job_id, owner_id), members in sorted(groups.items()):
            if len(members) < 2:
                continue
            members.sort(key=lambda r: r.id, reverse=True)
            duplicates = members[1:]
            to_delete.extend(duplicates)
            summary.details.append(DuplicateGroup(job_id, owner_id, len(duplicates)))
            self.logger.debug(
                "Marking duplicates for removal",
                job_id=job_id,
                owner_id=owner_id,
                kept=members[0].id,
                removed=[r.id for r in duplicates],
            )

        summary.removed = self.store.delete_many(to_delete)
        return summary

    def _run_aggregate(self) -> ReconciliationSummary:
        with self.store.transaction():
            summary = ReconciliationSummary(processed=self.store.count())
            for job_id, owner_id, members in self.store.find_duplicate_groups():
                removed = self.store.delete_superseded(job_id, owner_id)
                if removed == 0:
                    continue
                summary.removed += removed
                summary.details.append(DuplicateGroup(job_id, owner_id, removed))
                self.logger.debug(
                    "Removed superseded records",
                    job_id=job_id,
                    owner_id=owner_id,
                    members=members,
                    removed=removed,
                )
        return summary


def cleanup_duplicate_records(db_path: Path, strategy: str = "aggregate") -> ReconciliationSummary:
    """
    Run a reconciliation sweep against a database file.

    Args:
        db_path: Path to SQLite database file
        strategy: "aggregate" (default) or "scan"

    Returns:
        Summary of records scanned and duplicates removed
    """
    session = get_session(db_path)
    try:
        return ReconciliationEngine(RecordStore(session), strategy=strategy).run()
    except Exception as e:
        get_logger().record_error(type(e).__name__)
        get_logger().error(f"Reconciliation failed: {e}", db_path=str(db_path), strategy=strategy)
        raise
    finally:
        session.close()
