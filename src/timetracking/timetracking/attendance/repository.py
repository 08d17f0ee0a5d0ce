from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from .model import AttendanceSession, BillableTotals, SessionFilter


class AttendanceStore(Protocol):
    """Persistence contract for check-in sessions.

    Implementations guarantee at most one open, non-deleted session per worker,
    even under concurrent ``create_session`` calls.
    """

    def find_open_session(self, worker_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_session(self, session_id: str, worker_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def create_session(
        self,
        *,
        worker_id: str,
        job_id: str,
        check_in_time: datetime,
        hourly_rate: Optional[Decimal],
        notes: Optional[str] = None,
    ) -> AttendanceSession:
        """Insert an open session.

        Raises ConflictError when the worker already has an open session.
        """
        raise NotImplementedError

    def close_session(
        self,
        *,
        session_id: str,
        worker_id: str,
        check_out_time: datetime,
        duration_hours: Decimal,
        billable_amount: Decimal,
        notes: Optional[str] = None,
    ) -> Optional[AttendanceSession]:
        """Close an open session in one atomic update.

        Returns None when no open, non-deleted session matches id and worker.
        ``notes`` replaces the stored notes only when given.
        """
        raise NotImplementedError

    def soft_delete_session(self, session_id: str, worker_id: str) -> bool:
        raise NotImplementedError

    def list_sessions(
        self,
        filters: SessionFilter,
        *,
        limit: int,
        offset: int,
    ) -> Tuple[Sequence[AttendanceSession], int]:
        """Newest check-in first; returns the page and the unpaged total."""
        raise NotImplementedError

    def billable_totals(self, worker_id: str, start: datetime, end: datetime) -> BillableTotals:
        """Sum hours and amounts of closed sessions checked in within [start, end]."""
        raise NotImplementedError
