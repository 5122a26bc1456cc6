from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import CheckInType


@dataclass(frozen=True)
class CheckIn:
    id: int
    attendee_id: int
    check_in_type: CheckInType
    checked_in_at: datetime
    checked_in_by: str
    location: str
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "attendee_id": self.attendee_id,
            "check_in_type": self.check_in_type.value,
            "checked_in_at": isoformat(self.checked_in_at),
            "checked_in_by": self.checked_in_by,
            "location": self.location,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class CheckInResult:
    attendee_name: str
    check_in_type: CheckInType
    checked_in_at: datetime

    def to_dict(self) -> dict:
        return {
            "attendee_name": self.attendee_name,
            "check_in_type": self.check_in_type.value,
            "checked_in_at": isoformat(self.checked_in_at),
        }
