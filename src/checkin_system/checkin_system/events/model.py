from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat


@dataclass(frozen=True)
class Event:
    id: int
    event_code: str
    event_name: str
    event_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_code": self.event_code,
            "event_name": self.event_name,
            "event_date": isoformat(self.event_date),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
