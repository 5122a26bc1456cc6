from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreUnavailable
from .connection import DatabaseConnection
from .errors import DuplicateKeyError

logger = logging.getLogger(__name__)

_DUP_KEY_RE = re.compile(r"for key '([^']+)'")


def _constraint_name(exc: mysql.connector.Error) -> str:
    # MySQL 8 reports 'table.key', older servers just 'key'.
    match = _DUP_KEY_RE.search(str(getattr(exc, "msg", "") or exc))
    if not match:
        return "unknown"
    return match.group(1).rsplit(".", 1)[-1]


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as exc:
        logger.warning("Rollback failed: %s", exc)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` and commit on success.

    Driver errors never leave this block: duplicate keys become
    ``DuplicateKeyError``, anything else is logged and becomes
    ``StoreUnavailable``.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed: %s", exc)
        raise StoreUnavailable() from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        _rollback(conn)
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyError(_constraint_name(exc)) from exc
        logger.error("Database integrity error: %s", exc, exc_info=True)
        raise StoreUnavailable() from exc
    except mysql.connector.Error as exc:
        _rollback(conn)
        logger.error("Database operation failed: %s", exc, exc_info=True)
        raise StoreUnavailable() from exc
    except Exception:
        _rollback(conn)
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def like_pattern(value: str) -> str:
    """Escape LIKE wildcards and wrap for a contains-match."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
