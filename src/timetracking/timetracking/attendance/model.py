from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one check-in log row.

    ``hourly_rate`` is the worker's rate snapshot at check-in.
    ``duration_hours`` and ``billable_amount`` are set once, at check-out.
    The trailing job/worker/site fields are display details filled by
    listing reads and by check-in; they are None on plain reads.
    """

    session_id: str
    worker_id: str
    job_id: str
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    hourly_rate: Optional[Decimal] = None
    duration_hours: Optional[Decimal] = None
    billable_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    job_name: Optional[str] = None
    job_number: Optional[str] = None
    worker_name: Optional[str] = None
    site_address: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None and self.deleted_at is None


@dataclass(frozen=True)
class SessionFilter:
    """Read-side filter; deleted sessions are always excluded."""

    company_id: Optional[str] = None
    worker_id: Optional[str] = None
    job_id: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    active_only: bool = False


@dataclass(frozen=True)
class SessionPage:
    items: Sequence[AttendanceSession] = field(default_factory=tuple)
    total: int = 0
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class BillableTotals:
    total_hours: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("0.00")
