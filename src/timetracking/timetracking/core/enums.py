from __future__ import annotations

from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle status of a job as stored by the jobs module."""

    DRAFT = "draft"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


CHECK_IN_ALLOWED_STATUSES = frozenset({JobStatus.PLANNED, JobStatus.IN_PROGRESS})

JOB_STATUS_REJECTIONS = {
    JobStatus.COMPLETED: "This job is already completed.",
    JobStatus.CANCELLED: "This job has been cancelled.",
    JobStatus.ON_HOLD: "This job is currently on hold.",
    JobStatus.ARCHIVED: "This job has been archived.",
    JobStatus.DRAFT: "This job is still in draft status.",
}
