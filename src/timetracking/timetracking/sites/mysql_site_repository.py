from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Site
from .repository import SiteRepository


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, site_id: str, company_id: str) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, company_id, name, latitude, longitude, radius
                FROM sites
                WHERE id=%s AND company_id=%s AND deleted_at IS NULL
                """,
                (site_id, company_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Site(
                site_id=r["id"],
                company_id=r["company_id"],
                name=r["name"],
                latitude=_as_float(r.get("latitude")),
                longitude=_as_float(r.get("longitude")),
                radius_m=_as_float(r.get("radius")),
            )
