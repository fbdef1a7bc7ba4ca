"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path

from resumestore.database import Applicant, Job, init_database, get_session
from resumestore.logger import StructuredLogger, get_logger, reset_logger
from resumestore.store import RecordStore


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Keep log files out of the working tree and start every test with fresh metrics."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized database with two jobs and two applicants."""
    path = tmp_path / "resumes.db"
    init_database(path)
    session = get_session(path)
    session.add_all([
        Job(id=1, title="backend engineer", company="acme"),
        Job(id=2, title="data analyst", company="beta"),
        Applicant(id=10, email="ana@example.com", name="Ana"),
        Applicant(id=11, email="bo@example.com", name="Bo"),
    ])
    session.commit()
    session.close()
    return path


@pytest.fixture
def session(db_path):
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def metrics_logger(tmp_path) -> StructuredLogger:
    return StructuredLogger(name="resumestore_test", log_dir=tmp_path / "logs", enable_console=False)


@pytest.fixture
def store(session, metrics_logger) -> RecordStore:
    return RecordStore(session, logger=metrics_logger)


@pytest.fixture
def raw_result() -> str:
    """Evaluation payload as the analysis service emits it."""
    return "{'Skills': {'Python': 90, 'Communication': None}, 'Fit': {'remote': True, 'senior': False}}"
