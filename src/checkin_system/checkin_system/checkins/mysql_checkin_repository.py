from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import CheckInType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CheckIn
from .repository import CheckInRepository

_COLUMNS = "c.id, c.attendee_id, c.check_in_type, c.checked_in_at, c.checked_in_by, c.location, c.notes"


def _to_checkin(row: Dict[str, Any]) -> CheckIn:
    return CheckIn(
        id=int(row["id"]),
        attendee_id=int(row["attendee_id"]),
        check_in_type=CheckInType(row["check_in_type"]),
        checked_in_at=row["checked_in_at"],
        checked_in_by=row["checked_in_by"],
        location=row["location"],
        notes=row.get("notes"),
    )


class MySQLCheckInRepository(CheckInRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, *, attendee_id: int, check_in_type: CheckInType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM check_ins WHERE attendee_id=%s AND check_in_type=%s",
                (attendee_id, check_in_type.value),
            )
            return fetchone(cur) is not None

    def create(
        self,
        *,
        attendee_id: int,
        check_in_type: CheckInType,
        checked_in_at: datetime,
        checked_in_by: str,
        location: str,
        notes: Optional[str] = None,
    ) -> CheckIn:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO check_ins(attendee_id, check_in_type, checked_in_at, checked_in_by, location, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (attendee_id, check_in_type.value, checked_in_at, checked_in_by, location, notes),
            )
            return CheckIn(
                id=int(cur.lastrowid),
                attendee_id=attendee_id,
                check_in_type=check_in_type,
                checked_in_at=checked_in_at,
                checked_in_by=checked_in_by,
                location=location,
                notes=notes,
            )

    def list_for_attendee(self, attendee_id: int) -> Sequence[CheckIn]:
        return self.list_for_attendees([attendee_id]).get(int(attendee_id), [])

    def list_for_attendees(self, attendee_ids: Sequence[int]) -> Dict[int, List[CheckIn]]:
        ids = [int(i) for i in attendee_ids]
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM check_ins c
                WHERE c.attendee_id IN ({placeholders})
                ORDER BY c.checked_in_at ASC, c.id ASC
                """,
                tuple(ids),
            )
            out: Dict[int, List[CheckIn]] = {}
            for row in fetchall(cur):
                ci = _to_checkin(row)
                out.setdefault(ci.attendee_id, []).append(ci)
            return out

    def list_recorded(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[CheckIn]:
        sql = f"SELECT {_COLUMNS} FROM check_ins c JOIN attendees a ON a.id = c.attendee_id WHERE 1=1"
        params: list = []
        if since is not None:
            sql += " AND c.checked_in_at >= %s"
            params.append(since)
        if event_id is not None:
            sql += " AND a.event_id = %s"
            params.append(event_id)
        sql += " ORDER BY c.checked_in_at DESC, c.id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_checkin(r) for r in fetchall(cur)]
