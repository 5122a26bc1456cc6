from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..checkins.model import CheckIn
from ..common.datetime_utils import isoformat
from ..events.model import Event

# Columns an admin update may replace. badge_uid and event_id are immutable.
UPDATABLE_FIELDS = (
    "full_name",
    "email",
    "phone",
    "category",
    "institution",
    "meal_entitled",
    "kit_entitled",
    "notes",
)


@dataclass(frozen=True)
class Attendee:
    id: int
    event_id: int
    badge_uid: str
    full_name: str
    category: str
    email: Optional[str] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    meal_entitled: bool = False
    kit_entitled: bool = False
    notes: Optional[str] = None
    badge_print_template: str = "TPL_A6_V1"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "badge_uid": self.badge_uid,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "category": self.category,
            "institution": self.institution,
            "meal_entitled": self.meal_entitled,
            "kit_entitled": self.kit_entitled,
            "notes": self.notes,
            "badge_print_template": self.badge_print_template,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass(frozen=True)
class AttendeeDetail:
    """Attendee joined with its event and check-in history."""

    attendee: Attendee
    event: Optional[Event] = None
    check_ins: Sequence[CheckIn] = field(default_factory=tuple)

    def has_checked_in(self, check_in_type) -> bool:
        return any(ci.check_in_type == check_in_type for ci in self.check_ins)

    def to_dict(self) -> dict:
        out = self.attendee.to_dict()
        out["events"] = (
            {"event_code": self.event.event_code, "event_name": self.event.event_name, "event_date": isoformat(self.event.event_date)}
            if self.event
            else None
        )
        out["check_ins"] = [
            {
                "check_in_type": ci.check_in_type.value,
                "checked_in_at": isoformat(ci.checked_in_at),
                "location": ci.location,
            }
            for ci in self.check_ins
        ]
        return out


@dataclass(frozen=True)
class RegistrationResult:
    badge_uid: str
    attendee_name: str
    event_name: str
    event_code: str

    def to_dict(self) -> dict:
        return {
            "badge_uid": self.badge_uid,
            "attendee_name": self.attendee_name,
            "event_name": self.event_name,
        }


@dataclass(frozen=True)
class AttendeePage:
    items: Sequence[AttendeeDetail]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.total > self.offset + self.limit

    def pagination(self) -> dict:
        return {"total": self.total, "limit": self.limit, "offset": self.offset, "hasMore": self.has_more}
