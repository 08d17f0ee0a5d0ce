from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP
from typing import Optional

from ..attendance.model import BillableTotals, SessionFilter, SessionPage
from ..attendance.repository import AttendanceStore
from ..core.constants import DEFAULT_PAGE_SIZE, MONEY_QUANTUM
from ..core.exceptions import BadRequestError


class AttendanceReportService:
    """Read-only history and billable-hours lookups."""

    def __init__(self, attendance: AttendanceStore, *, default_limit: int = DEFAULT_PAGE_SIZE):
        self._attendance = attendance
        self._default_limit = int(default_limit)

    def get_worker_history(self, worker_id: str, *, page: int = 1, limit: Optional[int] = None) -> SessionPage:
        return self._page(SessionFilter(worker_id=worker_id), page=page, limit=limit)

    def list_sessions(
        self,
        company_id: str,
        *,
        worker_id: Optional[str] = None,
        job_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        active_only: bool = False,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SessionPage:
        if start and end and end < start:
            raise BadRequestError("end_date must not be before start_date")
        filters = SessionFilter(
            company_id=company_id,
            worker_id=worker_id,
            job_id=job_id,
            start=start,
            end=end,
            active_only=active_only,
        )
        return self._page(filters, page=page, limit=limit)

    def get_billable_totals(self, worker_id: str, start: datetime, end: datetime) -> BillableTotals:
        if end < start:
            raise BadRequestError("end_date must not be before start_date")
        totals = self._attendance.billable_totals(worker_id, start, end)
        return BillableTotals(
            total_hours=totals.total_hours.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
            total_amount=totals.total_amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
        )

    def _page(self, filters: SessionFilter, *, page: int, limit: Optional[int]) -> SessionPage:
        page = max(int(page), 1)
        limit = int(limit or self._default_limit)
        items, total = self._attendance.list_sessions(filters, limit=limit, offset=(page - 1) * limit)
        return SessionPage(items=tuple(items), total=total, page=page, limit=limit)
