from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import JobStatus


@dataclass(frozen=True)
class Job:
    """Read model of a job, as far as time tracking needs it."""

    job_id: str
    company_id: str
    name: str
    status: Optional[JobStatus]
    site_id: Optional[str] = None
    job_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
