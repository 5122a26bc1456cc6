from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def get_by_code(self, event_code: str) -> Optional[Event]:
        raise NotImplementedError

    def create(self, *, event_code: str, event_name: str, event_date: date, now: datetime) -> Event:
        """Insert a new event.

        Raises DuplicateKeyError when the event code is taken.
        """

        raise NotImplementedError

    def list(self, *, from_date: Optional[date] = None, limit: int = 50) -> Sequence[Event]:
        """Events ordered by event_date, newest first."""

        raise NotImplementedError

    def list_created_since(self, *, since: datetime, event_id: Optional[int] = None) -> Sequence[Event]:
        raise NotImplementedError
