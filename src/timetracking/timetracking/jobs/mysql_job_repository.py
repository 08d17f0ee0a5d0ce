from __future__ import annotations

from typing import Optional

from ..core.enums import JobStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Job
from .repository import JobRepository


class MySQLJobRepository(JobRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, job_id: str, company_id: str) -> Optional[Job]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, company_id, site_id, job_number, name, status, start_date, end_date
                FROM jobs
                WHERE id=%s AND company_id=%s AND deleted_at IS NULL
                """,
                (job_id, company_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Job(
                job_id=r["id"],
                company_id=r["company_id"],
                name=r["name"],
                status=JobStatus(r["status"]) if r.get("status") else None,
                site_id=r.get("site_id"),
                job_number=r.get("job_number"),
                start_date=r.get("start_date"),
                end_date=r.get("end_date"),
            )

    def is_worker_assigned(self, job_id: str, worker_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS assigned FROM job_workers WHERE job_id=%s AND user_id=%s
                UNION ALL
                SELECT 1 AS assigned FROM job_managers WHERE job_id=%s AND user_id=%s
                LIMIT 1
                """,
                (job_id, worker_id, job_id, worker_id),
            )
            return fetchone(cur) is not None
