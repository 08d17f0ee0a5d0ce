from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple

import mysql.connector

from ..core.constants import ALREADY_CHECKED_IN_MESSAGE
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, to_decimal
from .model import AttendanceSession, BillableTotals, SessionFilter
from .repository import AttendanceStore

OPEN_SESSION_KEY = "uq_check_in_logs_open_worker"

_COLUMNS = """
    cil.id, cil.worker_id, cil.job_id, cil.check_in_time, cil.check_out_time,
    cil.hourly_rate, cil.duration_hours, cil.billable_amount, cil.notes,
    cil.deleted_at, cil.created_at, cil.updated_at
"""

_DETAIL_COLUMNS = """
    j.name AS job_name, j.job_number,
    u.first_name, u.last_name, u.email,
    s.address AS site_address
"""

_DETAIL_JOINS = """
    JOIN users u ON u.id = cil.worker_id
    LEFT JOIN jobs j ON j.id = cil.job_id
    LEFT JOIN sites s ON s.id = j.site_id
"""


def live_sessions_where(filters: SessionFilter | None = None) -> Tuple[str, list[object]]:
    """Build the WHERE clause shared by every read.

    Always excludes soft-deleted rows; every query against check_in_logs goes
    through here.
    """
    clauses = ["cil.deleted_at IS NULL"]
    params: list[object] = []
    if filters is None:
        return " AND ".join(clauses), params

    if filters.company_id is not None:
        clauses.append("u.company_id=%s")
        params.append(filters.company_id)
    if filters.worker_id is not None:
        clauses.append("cil.worker_id=%s")
        params.append(filters.worker_id)
    if filters.job_id is not None:
        clauses.append("cil.job_id=%s")
        params.append(filters.job_id)
    if filters.start is not None:
        clauses.append("cil.check_in_time >= %s")
        params.append(filters.start)
    if filters.end is not None:
        clauses.append("cil.check_in_time <= %s")
        params.append(filters.end)
    if filters.active_only:
        clauses.append("cil.check_out_time IS NULL")

    return " AND ".join(clauses), params


def _worker_name(r: Dict[str, Any]) -> Optional[str]:
    first, last = r.get("first_name"), r.get("last_name")
    if first and last:
        return f"{first} {last}".strip()
    return r.get("email")


def _to_session(r: Dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=r["id"],
        worker_id=r["worker_id"],
        job_id=r["job_id"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        hourly_rate=to_decimal(r.get("hourly_rate")),
        duration_hours=to_decimal(r.get("duration_hours")),
        billable_amount=to_decimal(r.get("billable_amount")),
        notes=r.get("notes"),
        deleted_at=r.get("deleted_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        job_name=r.get("job_name"),
        job_number=r.get("job_number"),
        worker_name=_worker_name(r),
        site_address=r.get("site_address"),
    )


class MySQLAttendanceStore(AttendanceStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_open_session(self, worker_id: str) -> Optional[AttendanceSession]:
        where, params = live_sessions_where(SessionFilter(worker_id=worker_id, active_only=True))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM check_in_logs cil
                WHERE {where}
                ORDER BY cil.check_in_time DESC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def find_session(self, session_id: str, worker_id: str) -> Optional[AttendanceSession]:
        where, params = live_sessions_where(SessionFilter(worker_id=worker_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM check_in_logs cil
                WHERE cil.id=%s AND {where}
                """,
                (session_id, *params),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create_session(
        self,
        *,
        worker_id: str,
        job_id: str,
        check_in_time: datetime,
        hourly_rate: Optional[Decimal],
        notes: Optional[str] = None,
    ) -> AttendanceSession:
        session_id = str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO check_in_logs(id, worker_id, job_id, check_in_time, hourly_rate, notes)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (session_id, worker_id, job_id, check_in_time, hourly_rate, notes or None),
                )
                cur.execute(f"SELECT {_COLUMNS} FROM check_in_logs cil WHERE cil.id=%s", (session_id,))
                r = fetchone(cur)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc, key_name=OPEN_SESSION_KEY):
                raise ConflictError(ALREADY_CHECKED_IN_MESSAGE) from exc
            raise
        return _to_session(r)

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
        with db_cursor(self._conn_factory) as (_, cur):
            # The open-state predicate sits in the UPDATE itself: a concurrent
            # close that committed first leaves nothing to match here.
            cur.execute(
                """
                UPDATE check_in_logs
                SET check_out_time=%s, duration_hours=%s, billable_amount=%s, notes=COALESCE(%s, notes)
                WHERE id=%s AND worker_id=%s AND check_out_time IS NULL AND deleted_at IS NULL
                """,
                (check_out_time, duration_hours, billable_amount, notes or None, session_id, worker_id),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_COLUMNS} FROM check_in_logs cil WHERE cil.id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def soft_delete_session(self, session_id: str, worker_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE check_in_logs
                SET deleted_at=UTC_TIMESTAMP(6)
                WHERE id=%s AND worker_id=%s AND deleted_at IS NULL
                """,
                (session_id, worker_id),
            )
            return cur.rowcount > 0

    def list_sessions(
        self,
        filters: SessionFilter,
        *,
        limit: int,
        offset: int,
    ) -> Tuple[Sequence[AttendanceSession], int]:
        where, params = live_sessions_where(filters)
        join = "JOIN users u ON u.id = cil.worker_id" if filters.company_id is not None else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS total FROM check_in_logs cil {join} WHERE {where}",
                tuple(params),
            )
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}, {_DETAIL_COLUMNS}
                FROM check_in_logs cil
                {_DETAIL_JOINS}
                WHERE {where}
                ORDER BY cil.check_in_time DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            rows = fetchall(cur)
            return [_to_session(r) for r in rows], total

    def billable_totals(self, worker_id: str, start: datetime, end: datetime) -> BillableTotals:
        where, params = live_sessions_where(SessionFilter(worker_id=worker_id, start=start, end=end))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    COALESCE(SUM(cil.duration_hours), 0) AS total_hours,
                    COALESCE(SUM(cil.billable_amount), 0) AS total_amount
                FROM check_in_logs cil
                WHERE {where} AND cil.check_out_time IS NOT NULL
                """,
                tuple(params),
            )
            r = fetchone(cur) or {}
            return BillableTotals(
                total_hours=to_decimal(r.get("total_hours")) or Decimal("0.00"),
                total_amount=to_decimal(r.get("total_amount")) or Decimal("0.00"),
            )
