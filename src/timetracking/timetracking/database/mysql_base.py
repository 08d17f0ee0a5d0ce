from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.constants import MYSQL_DUPLICATE_KEY_ERRNO
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary, buffered=True)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: mysql.connector.Error, *, key_name: str | None = None) -> bool:
    """True when ``exc`` is a unique-key violation (optionally on ``key_name``)."""
    if getattr(exc, "errno", None) != MYSQL_DUPLICATE_KEY_ERRNO:
        return False
    if key_name is None:
        return True
    return key_name in str(getattr(exc, "msg", "") or exc)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Normalize MySQL DECIMAL values across connector implementations.

    mysql-connector returns DECIMAL as ``Decimal`` with the C extension, but
    can hand back ``str``/``bytes`` with the pure-Python protocol.
    """

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bytes):
        value = value.decode("ascii")
    return Decimal(str(value))
