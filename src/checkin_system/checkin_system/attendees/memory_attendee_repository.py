from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..database.memory_store import MemoryStore
from .model import UPDATABLE_FIELDS, Attendee
from .repository import AttendeeRepository


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


def _contains(search: Optional[str]):
    if not search:
        return lambda row: True
    needle = search.lower()

    def match(row: Dict[str, Any]) -> bool:
        return any(needle in (row.get(col) or "").lower() for col in ("full_name", "email", "badge_uid"))

    return match


class MemoryAttendeeRepository(AttendeeRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def get_by_id(self, attendee_id: int) -> Optional[Attendee]:
        row = self._store.find("attendees", id=int(attendee_id))
        return _to_attendee(row) if row else None

    def get_by_badge(self, badge_uid: str) -> Optional[Attendee]:
        row = self._store.find("attendees", badge_uid=badge_uid)
        return _to_attendee(row) if row else None

    def get_by_event_email(self, *, event_id: int, email: str) -> Optional[Attendee]:
        row = self._store.find("attendees", event_id=int(event_id), email=email)
        return _to_attendee(row) if row else None

    def create(self, *, fields: Mapping[str, Any], now: datetime) -> Attendee:
        row = self._store.insert("attendees", {**dict(fields), "created_at": now, "updated_at": now})
        return _to_attendee(row)

    def search(self, *, query: str, event_id: Optional[int] = None, limit: int = 20) -> Sequence[Attendee]:
        rows = self._store.query(
            "attendees",
            {"event_id": int(event_id)} if event_id is not None else None,
            where=_contains(query),
            order_by="full_name",
            limit=limit,
        )
        return [_to_attendee(r) for r in rows]

    def list_page(
        self,
        *,
        event_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[Sequence[Attendee], int]:
        rows = self._store.query(
            "attendees",
            {"event_id": int(event_id)} if event_id is not None else None,
            where=_contains(search),
            order_by="created_at",
            descending=True,
        )
        return [_to_attendee(r) for r in rows[offset: offset + limit]], len(rows)

    def update(self, attendee_id: int, *, fields: Mapping[str, Any], now: datetime) -> Optional[Attendee]:
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if changes:
            changes["updated_at"] = now
        row = self._store.update("attendees", int(attendee_id), changes)
        return _to_attendee(row) if row else None

    def delete(self, attendee_id: int) -> bool:
        return self._store.delete("attendees", int(attendee_id))

    def list_created_since(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[Attendee]:
        rows = self._store.query(
            "attendees",
            {"event_id": int(event_id)} if event_id is not None else None,
            where=(lambda r: r["created_at"] >= since) if since is not None else None,
            order_by="created_at",
            descending=True,
        )
        return [_to_attendee(r) for r in rows]

    def count_by_event(self, event_ids: Sequence[int]) -> Dict[int, int]:
        return {int(i): self._store.count("attendees", {"event_id": int(i)}) for i in event_ids}
