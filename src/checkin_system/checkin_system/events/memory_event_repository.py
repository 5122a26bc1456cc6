from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..database.memory_store import MemoryStore
from .model import Event
from .repository import EventRepository


def _to_event(row: Dict[str, Any]) -> Event:
    return Event(
        id=int(row["id"]),
        event_code=row["event_code"],
        event_name=row["event_name"],
        event_date=row["event_date"],
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MemoryEventRepository(EventRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def get_by_id(self, event_id: int) -> Optional[Event]:
        row = self._store.find("events", id=int(event_id))
        return _to_event(row) if row else None

    def get_by_code(self, event_code: str) -> Optional[Event]:
        row = self._store.find("events", event_code=event_code)
        return _to_event(row) if row else None

    def create(self, *, event_code: str, event_name: str, event_date: date, now: datetime) -> Event:
        row = self._store.insert(
            "events",
            {
                "event_code": event_code,
                "event_name": event_name,
                "event_date": event_date,
                "created_at": now,
                "updated_at": now,
            },
        )
        return _to_event(row)

    def list(self, *, from_date: Optional[date] = None, limit: int = 50) -> Sequence[Event]:
        rows = self._store.query(
            "events",
            where=(lambda r: r["event_date"] >= from_date) if from_date is not None else None,
            order_by="event_date",
            descending=True,
            limit=limit,
        )
        return [_to_event(r) for r in rows]

    def list_created_since(self, *, since: datetime, event_id: Optional[int] = None) -> Sequence[Event]:
        rows = self._store.query(
            "events",
            {"id": int(event_id)} if event_id is not None else None,
            where=lambda r: r["created_at"] >= since,
            order_by="event_date",
            descending=True,
        )
        return [_to_event(r) for r in rows]
