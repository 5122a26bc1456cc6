from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern
from .model import UPDATABLE_FIELDS, Attendee
from .repository import AttendeeRepository

_COLUMNS = (
    "id, event_id, badge_uid, full_name, email, phone, category, institution, "
    "meal_entitled, kit_entitled, notes, badge_print_template, created_at, updated_at"
)
_INSERT_FIELDS = (
    "event_id",
    "badge_uid",
    "full_name",
    "email",
    "phone",
    "category",
    "institution",
    "meal_entitled",
    "kit_entitled",
    "notes",
    "badge_print_template",
)


def _to_attendee(row: Dict[str, Any]) -> Attendee:
    return Attendee(
        id=int(row["id"]),
        event_id=int(row["event_id"]),
        badge_uid=row["badge_uid"],
        full_name=row["full_name"],
        email=row.get("email"),
        phone=row.get("phone"),
        category=row["category"],
        institution=row.get("institution"),
        meal_entitled=bool(row.get("meal_entitled")),
        kit_entitled=bool(row.get("kit_entitled")),
        notes=row.get("notes"),
        badge_print_template=row.get("badge_print_template") or "TPL_A6_V1",
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _search_clause(search: Optional[str]) -> Tuple[str, list]:
    if not search:
        return "", []
    pattern = like_pattern(search)
    return " AND (full_name LIKE %s OR email LIKE %s OR badge_uid LIKE %s)", [pattern, pattern, pattern]


class MySQLAttendeeRepository(AttendeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Attendee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendees WHERE {where}", params)
            row = fetchone(cur)
            return _to_attendee(row) if row else None

    def get_by_id(self, attendee_id: int) -> Optional[Attendee]:
        return self._get_one("id=%s", (attendee_id,))

    def get_by_badge(self, badge_uid: str) -> Optional[Attendee]:
        return self._get_one("badge_uid=%s", (badge_uid,))

    def get_by_event_email(self, *, event_id: int, email: str) -> Optional[Attendee]:
        return self._get_one("event_id=%s AND email=%s", (event_id, email))

    def create(self, *, fields: Mapping[str, Any], now: datetime) -> Attendee:
        values = [fields.get(name) for name in _INSERT_FIELDS]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendees({", ".join(_INSERT_FIELDS)}, created_at, updated_at)
                VALUES({", ".join(["%s"] * len(_INSERT_FIELDS))}, %s, %s)
                """,
                (*values, now, now),
            )
            new_id = int(cur.lastrowid)
        return _to_attendee({**dict(zip(_INSERT_FIELDS, values)), "id": new_id, "created_at": now, "updated_at": now})

    def search(self, *, query: str, event_id: Optional[int] = None, limit: int = 20) -> Sequence[Attendee]:
        clause, params = _search_clause(query)
        sql = f"SELECT {_COLUMNS} FROM attendees WHERE 1=1{clause}"
        if event_id is not None:
            sql += " AND event_id=%s"
            params.append(event_id)
        sql += " ORDER BY full_name ASC, id ASC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_attendee(r) for r in fetchall(cur)]

    def list_page(
        self,
        *,
        event_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[Sequence[Attendee], int]:
        clause, params = _search_clause(search)
        where = f"WHERE 1=1{clause}"
        if event_id is not None:
            where += " AND event_id=%s"
            params.append(event_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendees {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendees {where} ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_attendee(r) for r in fetchall(cur)], total

    def update(self, attendee_id: int, *, fields: Mapping[str, Any], now: datetime) -> Optional[Attendee]:
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        with db_cursor(self._conn_factory) as (_, cur):
            if changes:
                assignments = ", ".join(f"{name}=%s" for name in changes)
                cur.execute(
                    f"UPDATE attendees SET {assignments}, updated_at=%s WHERE id=%s",
                    (*changes.values(), now, attendee_id),
                )
            cur.execute(f"SELECT {_COLUMNS} FROM attendees WHERE id=%s", (attendee_id,))
            row = fetchone(cur)
            return _to_attendee(row) if row else None

    def delete(self, attendee_id: int) -> bool:
        # check_ins rows go through ON DELETE CASCADE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendees WHERE id=%s", (attendee_id,))
            return cur.rowcount > 0

    def list_created_since(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[Attendee]:
        sql = f"SELECT {_COLUMNS} FROM attendees WHERE 1=1"
        params: list = []
        if since is not None:
            sql += " AND created_at >= %s"
            params.append(since)
        if event_id is not None:
            sql += " AND event_id=%s"
            params.append(event_id)
        sql += " ORDER BY created_at DESC, id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_attendee(r) for r in fetchall(cur)]

    def count_by_event(self, event_ids: Sequence[int]) -> Dict[int, int]:
        ids = [int(i) for i in event_ids]
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT event_id, COUNT(*) AS total FROM attendees WHERE event_id IN ({placeholders}) GROUP BY event_id",
                tuple(ids),
            )
            counts = {int(r["event_id"]): int(r["total"]) for r in fetchall(cur)}
        return {i: counts.get(i, 0) for i in ids}
