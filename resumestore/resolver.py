"""
Resolution of job and owner identifiers into entities.

Jobs and applicants belong to other services; the store only needs to know
that they exist when a record is first created.
"""

from abc import ABC, abstractmethod

from .database import Applicant, Job


class ReferenceNotFound(LookupError):
    """Raised when a job or owner identifier does not resolve."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found with ID: {identifier}")


class ReferenceResolver(ABC):
    """Looks up the entities a record points at."""

    @abstractmethod
    def resolve_job(self, job_id: int) -> Job:
        """Return the job or raise ReferenceNotFound."""
        ...

    @abstractmethod
    def resolve_owner(self, owner_id: int) -> Applicant:
        """Return the applicant or raise ReferenceNotFound."""
        ...


class SqlReferenceResolver(ReferenceResolver):
    """Resolves references against the jobs and applicants tables."""

    def __init__(self, session):
        self.session = session

    def resolve_job(self, job_id: int) -> Job:
        job = self.session.get(Job, job_id)
        if job is None:
            raise ReferenceNotFound("job", job_id)
        return job

    def resolve_owner(self, owner_id: int) -> Applicant:
        owner = self.session.get(Applicant, owner_id)
        if owner is None:
            raise ReferenceNotFound("owner", owner_id)
        return owner
