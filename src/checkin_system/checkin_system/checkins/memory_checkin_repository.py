from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import CheckInType
from ..database.memory_store import MemoryStore
from .model import CheckIn
from .repository import CheckInRepository


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


class MemoryCheckInRepository(CheckInRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def exists(self, *, attendee_id: int, check_in_type: CheckInType) -> bool:
        return self._store.find("check_ins", attendee_id=int(attendee_id), check_in_type=check_in_type.value) is not None

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
        row = self._store.insert(
            "check_ins",
            {
                "attendee_id": int(attendee_id),
                "check_in_type": check_in_type.value,
                "checked_in_at": checked_in_at,
                "checked_in_by": checked_in_by,
                "location": location,
                "notes": notes,
            },
        )
        return _to_checkin(row)

    def list_for_attendee(self, attendee_id: int) -> Sequence[CheckIn]:
        rows = self._store.query("check_ins", {"attendee_id": int(attendee_id)}, order_by="checked_in_at")
        return [_to_checkin(r) for r in rows]

    def list_for_attendees(self, attendee_ids: Sequence[int]) -> Dict[int, List[CheckIn]]:
        wanted = {int(i) for i in attendee_ids}
        rows = self._store.query("check_ins", where=lambda r: r["attendee_id"] in wanted, order_by="checked_in_at")
        out: Dict[int, List[CheckIn]] = {}
        for row in rows:
            ci = _to_checkin(row)
            out.setdefault(ci.attendee_id, []).append(ci)
        return out

    def list_recorded(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[CheckIn]:
        attendee_ids = set(self._store.ids("attendees", {"event_id": int(event_id)})) if event_id is not None else None

        def keep(row: Dict[str, Any]) -> bool:
            if since is not None and row["checked_in_at"] < since:
                return False
            return attendee_ids is None or row["attendee_id"] in attendee_ids

        rows = self._store.query("check_ins", where=keep, order_by="checked_in_at", descending=True)
        return [_to_checkin(r) for r in rows]
