"""
Service layer over the record store.

Owns session lifetimes for callers such as the CLI and applies the retry
policy for transient storage errors (e.g. SQLite lock contention). Results
leave this layer as plain dicts so no session-bound objects escape.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import OperationalError

from .database import get_session
from .logger import get_logger
from .reconcile import ReconciliationEngine
from .retry import exponential_backoff, is_transient_error
from .store import RecordStore


def _log_retry(attempt: int, error: Exception, delay: float) -> None:
    get_logger().warning("Transient storage error, retrying", attempt=attempt, delay=delay, error=str(error))


class ResumeService:
    """Entry point for submitting and reading resume evaluations."""

    def __init__(self, db_path: Path, strict_translation: bool = False, reconcile_strategy: str = "aggregate"):
        self.db_path = db_path
        self.strict_translation = strict_translation
        self.reconcile_strategy = reconcile_strategy

    def _store(self, session) -> RecordStore:
        return RecordStore(session, strict_translation=self.strict_translation)

    @exponential_backoff(
        max_retries=3,
        base_delay=0.2,
        exceptions=(OperationalError,),
        retry_if=is_transient_error,
        on_retry=_log_retry,
    )
    def submit(self, resume_hash: str, raw_result: Optional[str], job_id: int, owner_id: int) -> Dict[str, Any]:
        session = get_session(self.db_path)
        try:
            record = self._store(session).upsert(resume_hash.strip(), raw_result, job_id, owner_id)
            return record.to_dict()
        finally:
            session.close()

    def get(self, resume_hash: str) -> Optional[Dict[str, Any]]:
        session = get_session(self.db_path)
        try:
            record = self._store(session).get_by_hash(resume_hash.strip())
            return record.to_dict() if record is not None else None
        finally:
            session.close()

    def list_records(self, job_id: Optional[int] = None, owner_id: Optional[int] = None) -> List[Dict[str, Any]]:
        session = get_session(self.db_path)
        try:
            store = self._store(session)
            if job_id is not None and owner_id is not None:
                records = store.list_by_job_and_owner(job_id, owner_id)
            elif job_id is not None:
                records = store.list_by_job(job_id)
            elif owner_id is not None:
                records = store.list_by_owner(owner_id)
            else:
                records = store.list_all()
            return [r.to_dict() for r in records]
        finally:
            session.close()

    def reconcile(self, strategy: Optional[str] = None) -> Dict[str, Any]:
        session = get_session(self.db_path)
        try:
            engine = ReconciliationEngine(self._store(session), strategy=strategy or self.reconcile_strategy)
            return engine.run().to_dict()
        finally:
            session.close()
