from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event
from .repository import EventRepository

_COLUMNS = "id, event_code, event_name, event_date, created_at, updated_at"


def _to_event(row: Dict[str, Any]) -> Event:
    return Event(
        id=int(row["id"]),
        event_code=row["event_code"],
        event_name=row["event_name"],
        event_date=row["event_date"],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE id=%s", (event_id,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def get_by_code(self, event_code: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_code=%s", (event_code,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def create(self, *, event_code: str, event_name: str, event_date: date, now: datetime) -> Event:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(event_code, event_name, event_date, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (event_code, event_name, event_date, now, now),
            )
            return Event(
                id=int(cur.lastrowid),
                event_code=event_code,
                event_name=event_name,
                event_date=event_date,
                created_at=now,
                updated_at=now,
            )

    def list(self, *, from_date: Optional[date] = None, limit: int = 50) -> Sequence[Event]:
        sql = f"SELECT {_COLUMNS} FROM events"
        params: list = []
        if from_date is not None:
            sql += " WHERE event_date >= %s"
            params.append(from_date)
        sql += " ORDER BY event_date DESC, id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_event(r) for r in fetchall(cur)]

    def list_created_since(self, *, since: datetime, event_id: Optional[int] = None) -> Sequence[Event]:
        sql = f"SELECT {_COLUMNS} FROM events WHERE created_at >= %s"
        params: list = [since]
        if event_id is not None:
            sql += " AND id = %s"
            params.append(event_id)
        sql += " ORDER BY event_date DESC, id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_event(r) for r in fetchall(cur)]
