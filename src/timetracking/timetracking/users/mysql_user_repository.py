from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_decimal
from .model import Worker
from .repository import WorkerRepository


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, worker_id: str, company_id: str) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, company_id, hourly_rate
                FROM users
                WHERE id=%s AND company_id=%s AND deleted_at IS NULL
                """,
                (worker_id, company_id),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Worker(
                worker_id=row["id"],
                company_id=row["company_id"],
                hourly_rate=to_decimal(row.get("hourly_rate")),
            )
