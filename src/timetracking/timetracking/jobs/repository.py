from __future__ import annotations

from typing import Optional, Protocol

from .model import Job


class JobRepository(Protocol):
    """Read-only job lookups owned by the jobs module."""

    def get_by_id(self, job_id: str, company_id: str) -> Optional[Job]:
        """Return the live job when it belongs to ``company_id``."""
        raise NotImplementedError

    def is_worker_assigned(self, job_id: str, worker_id: str) -> bool:
        """True when the user is on the job's worker or manager roster."""
        raise NotImplementedError
