"""
Resume record store.

Maps a resume content hash to its evaluation result. Submitting the same hash
again converges on one stored record: a non-empty payload overwrites the
result, an empty one leaves the record untouched. Job and owner references
are resolved only when a record is first created.

The hash column is unique. When two writers race to create the same hash, the
loser's insert fails on the constraint and is retried as an update.
"""

from contextlib import contextmanager
from typing import Dict, Any, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from . import translator
from .database import ResumeRecord
from .logger import get_logger, StructuredLogger
from .resolver import ReferenceResolver, SqlReferenceResolver
from .translator import TranslationFailure


def _is_empty(raw_result: Optional[str]) -> bool:
    return raw_result is None or raw_result.strip() == ""


class RecordStore:
    """Persistence for resume records, backed by a SQLAlchemy session."""

    def __init__(
        self,
        session,
        resolver: Optional[ReferenceResolver] = None,
        strict_translation: bool = False,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            session: SQLAlchemy session; every mutating call commits on it
            resolver: Reference resolver (default: lookups in the same database)
            strict_translation: Raise TranslationFailure on a malformed payload
                instead of storing an empty result
            logger: Logger receiving events and metrics (default: global logger)
        """
        self.session = session
        self.resolver = resolver or SqlReferenceResolver(session)
        self.strict_translation = strict_translation
        self.logger = logger or get_logger()

    @contextmanager
    def transaction(self):
        """Commit the enclosed work as one unit, rolling back on any error."""
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _translate(self, resume_hash: str, raw_result: str) -> str:
        try:
            canonical = translator.to_canonical(raw_result)
            parsed = translator.parse_result(canonical)
            if not parsed.ok:
                raise TranslationFailure(f"Result payload has the wrong shape: {parsed.error}")
            return canonical
        except TranslationFailure as e:
            self.logger.record_translation_failure()
            if self.strict_translation:
                self.logger.error("Rejecting malformed result payload", hash=resume_hash, error=str(e))
                raise
            self.logger.warning("Storing empty result for malformed payload", hash=resume_hash, error=str(e))
            return "{}"

    def upsert(self, resume_hash: str, raw_result: Optional[str], job_id: int, owner_id: int) -> ResumeRecord:
        """
        Create or update the record for a resume hash.

        Args:
            resume_hash: Content hash identifying the resume
            raw_result: Evaluation payload in the analysis service's notation, may be None
            job_id: Job the resume was submitted to (resolved on create only)
            owner_id: Applicant owning the resume (resolved on create only)

        Returns:
            The stored record

        Raises:
            ReferenceNotFound: On create, if the job or owner does not exist
            TranslationFailure: If strict_translation is set and the payload is malformed
        """
        canonical = None if _is_empty(raw_result) else self._translate(resume_hash, raw_result)

        existing = self.get_by_hash(resume_hash)
        if existing is not None:
            return self._apply_update(existing, canonical)

        job = self.resolver.resolve_job(job_id)
        owner = self.resolver.resolve_owner(owner_id)

        record = ResumeRecord(resume_hash=resume_hash, results=canonical, job_id=job.id, owner_id=owner.id)
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            existing = self.get_by_hash(resume_hash)
            if existing is None:
                raise
            self.logger.info("Hash created concurrently, retrying as update", hash=resume_hash)
            return self._apply_update(existing, canonical)

        self.logger.record_upsert("created")
        self.logger.debug("Created resume record", hash=resume_hash, id=record.id, job_id=job.id, owner_id=owner.id)
        return record

    def _apply_update(self, record: ResumeRecord, canonical: Optional[str]) -> ResumeRecord:
        if canonical is None or canonical == record.results:
            self.logger.record_upsert("unchanged")
            return record

        record.results = canonical
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.logger.record_upsert("updated")
        self.logger.debug("Updated resume record", hash=record.resume_hash, id=record.id)
        return record

    def get_by_hash(self, resume_hash: str) -> Optional[ResumeRecord]:
        return self.session.query(ResumeRecord).filter_by(resume_hash=resume_hash).first()

    def list_by_job(self, job_id: int) -> List[ResumeRecord]:
        return self.session.query(ResumeRecord).filter_by(job_id=job_id).order_by(ResumeRecord.id).all()

    def list_by_owner(self, owner_id: int) -> List[ResumeRecord]:
        return self.session.query(ResumeRecord).filter_by(owner_id=owner_id).order_by(ResumeRecord.id).all()

    def list_by_job_and_owner(self, job_id: int, owner_id: int) -> List[ResumeRecord]:
        """All records for the pair; more than one only until duplicates are reconciled."""
        return (
            self.session.query(ResumeRecord)
            .filter_by(job_id=job_id, owner_id=owner_id)
            .order_by(ResumeRecord.id)
            .all()
        )

    def get_by_job_and_owner(self, job_id: int, owner_id: int) -> Optional[ResumeRecord]:
        """The most recently created record for the pair."""
        return (
            self.session.query(ResumeRecord)
            .filter_by(job_id=job_id, owner_id=owner_id)
            .order_by(ResumeRecord.id.desc())
            .first()
        )

    def list_all(self) -> List[ResumeRecord]:
        """Full table scan. Expensive; meant for batch repair only."""
        return self.session.query(ResumeRecord).order_by(ResumeRecord.id).all()

    def results_for(self, record: ResumeRecord) -> Dict[str, Dict[str, Any]]:
        """Parsed result of a record, or an empty mapping if it has none."""
        if not record.results:
            return {}
        return translator.parse(record.results)

    def delete_many(self, records: Sequence[ResumeRecord]) -> int:
        """Delete the given records in one statement. Returns the number removed."""
        if not records:
            return 0
        ids = [r.id for r in records]
        with self.transaction():
            removed = (
                self.session.query(ResumeRecord)
                .filter(ResumeRecord.id.in_(ids))
                .delete(synchronize_session="fetch")
            )
        return removed

    def count(self) -> int:
        return self.session.query(func.count(ResumeRecord.id)).scalar()

    def find_duplicate_groups(self) -> List[Tuple[int, int, int]]:
        """(job_id, owner_id, member_count) for every pair holding more than one record."""
        rows = (
            self.session.query(ResumeRecord.job_id, ResumeRecord.owner_id, func.count(ResumeRecord.id))
            .group_by(ResumeRecord.job_id, ResumeRecord.owner_id)
            .having(func.count(ResumeRecord.id) > 1)
            .order_by(ResumeRecord.job_id, ResumeRecord.owner_id)
            .all()
        )
        return [(job_id, owner_id, count) for job_id, owner_id, count in rows]

    def delete_superseded(self, job_id: int, owner_id: int) -> int:
        """
        Delete every record of the pair except the newest one.

        The newest id is evaluated inside the delete statement itself, so a
        record inserted after the groups were read is kept rather than lost.
        Does not commit; run it inside transaction().
        """
        latest = aliased(ResumeRecord)
        newest_id = (
            self.session.query(func.max(latest.id))
            .filter(latest.job_id == job_id, latest.owner_id == owner_id)
            .scalar_subquery()
        )
        return (
            self.session.query(ResumeRecord)
            .filter(
                ResumeRecord.job_id == job_id,
                ResumeRecord.owner_id == owner_id,
                ResumeRecord.id != newest_id,
            )
            .delete(synchronize_session="fetch")
        )
