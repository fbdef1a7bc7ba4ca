"""
Tests for database.py - SQLite schema and record model.
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.exc import IntegrityError

from resumestore.database import Applicant, Job, ResumeRecord, init_database, get_session


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """Test that init_database creates all tables."""
        db_path = tmp_path / "test.db"
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(ResumeRecord).count() == 0
        assert session.query(Job).count() == 0
        assert session.query(Applicant).count() == 0
        session.close()

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_is_repeatable(self, db_path):
        """Running init again must keep existing rows."""
        init_database(db_path)

        session = get_session(db_path)
        assert session.query(Job).count() == 2
        session.close()


class TestResumeRecordModel:
    """Test the resume record mapping."""

    def test_ids_are_assigned_increasing(self, session):
        """Each new record gets a higher id than the previous one."""
        first = ResumeRecord(resume_hash="h1", job_id=1, owner_id=10)
        second = ResumeRecord(resume_hash="h2", job_id=1, owner_id=10)
        session.add(first)
        session.commit()
        session.add(second)
        session.commit()

        assert second.id > first.id

    def test_duplicate_hash_fails(self, session):
        """The hash column is unique."""
        session.add(ResumeRecord(resume_hash="same", job_id=1, owner_id=10))
        session.commit()

        session.add(ResumeRecord(resume_hash="same", job_id=2, owner_id=11))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_missing_hash_fails(self, session):
        """A record without a hash is rejected."""
        session.add(ResumeRecord(job_id=1, owner_id=10))

        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_timestamps_set_on_insert(self, session):
        """created_at and updated_at are filled on insert."""
        before = datetime.now()
        record = ResumeRecord(resume_hash="h1", job_id=1, owner_id=10)
        session.add(record)
        session.commit()
        after = datetime.now()

        assert before <= record.created_at <= after
        assert abs((record.created_at - record.updated_at).total_seconds()) < 1

    def test_updated_at_refreshed_on_change(self, session):
        """Mutating a record bumps updated_at but not created_at."""
        old = datetime.now() - timedelta(days=3)
        record = ResumeRecord(resume_hash="h1", job_id=1, owner_id=10, created_at=old, updated_at=old)
        session.add(record)
        session.commit()

        record.results = '{"Skills": {"Python": 1}}'
        session.commit()

        assert record.created_at == old
        assert record.updated_at > old

    def test_canonical_result_absent_without_results(self, session):
        record = ResumeRecord(resume_hash="h1", job_id=1, owner_id=10)
        session.add(record)
        session.commit()

        assert record.canonical_result is None

    def test_canonical_result_parsed(self, session):
        record = ResumeRecord(resume_hash="h1", results='{"Skills": {"Python": 90}}', job_id=1, owner_id=10)
        session.add(record)
        session.commit()

        assert record.canonical_result == {"Skills": {"Python": 90}}

    def test_relationships_load_references(self, session):
        record = ResumeRecord(resume_hash="h1", job_id=1, owner_id=10)
        session.add(record)
        session.commit()

        assert record.job.title == "backend engineer"
        assert record.owner.email == "ana@example.com"

    def test_to_dict(self, session):
        record = ResumeRecord(resume_hash="h1", results='{"A": {"b": null}}', job_id=2, owner_id=11)
        session.add(record)
        session.commit()

        data = record.to_dict()
        assert data["id"] == record.id
        assert data["hash"] == "h1"
        assert data["canonical_result"] == {"A": {"b": None}}
        assert data["job_id"] == 2
        assert data["owner_id"] == 11
        assert data["created_at"] == record.created_at.isoformat()
