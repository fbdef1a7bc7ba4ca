"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for resume evaluation storage. Jobs and applicants
are owned by other services; only their identity is needed here.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from . import translator

Base = declarative_base()


class Job(Base):
    """Job posting a resume is submitted against."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    company = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Applicant(Base):
    """Applicant that owns submitted resumes."""

    __tablename__ = "applicants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class ResumeRecord(Base):
    """Evaluation result for one submitted resume, keyed by content hash."""

    __tablename__ = "resume_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    resume_hash = Column(String, nullable=False, unique=True, index=True)
    results = Column(Text, nullable=True)  # canonical JSON text
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("applicants.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    job = relationship("Job")
    owner = relationship("Applicant")

    @property
    def canonical_result(self) -> Optional[Dict[str, Dict[str, Any]]]:
        if self.results is None:
            return None
        return translator.parse(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "hash": self.resume_hash,
            "canonical_result": self.canonical_result,
            "job_id": self.job_id,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<ResumeRecord id={self.id} hash={self.resume_hash!r} job={self.job_id} owner={self.owner_id}>"


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
