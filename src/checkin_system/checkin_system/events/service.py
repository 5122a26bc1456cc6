from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import coerce_date, now_utc
from ..common.validators import require_length, sanitize_input
from ..core.constants import DEFAULT_EVENTS_LIMIT
from ..core.exceptions import DuplicateEventCode, EventNotFound, ValidationError
from ..database.errors import UQ_EVENT_CODE, DuplicateKeyError
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    def get_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise EventNotFound(event_id)
        return event

    def create_event(
        self,
        *,
        event_code: str,
        event_name: str,
        event_date: object,
        now: Optional[datetime] = None,
    ) -> Event:
        code = require_length(sanitize_input(event_code), "event_code", min_len=2, max_len=50)
        name = require_length(sanitize_input(event_name), "event_name", min_len=2, max_len=255)
        try:
            when = coerce_date(event_date)
        except ValueError:
            raise ValidationError("Invalid date format", {"event_date": "invalid_date"}) from None

        if self._events.get_by_code(code):
            raise DuplicateEventCode(code)

        try:
            event = self._events.create(event_code=code, event_name=name, event_date=when, now=now or now_utc())
        except DuplicateKeyError as exc:
            if exc.constraint != UQ_EVENT_CODE:
                raise
            raise DuplicateEventCode(code) from exc

        logger.info("Event created: id=%s code=%s", event.id, event.event_code)
        return event

    def list_events(
        self,
        *,
        active_only: bool = False,
        limit: int = DEFAULT_EVENTS_LIMIT,
        today: Optional[date] = None,
    ) -> Sequence[Event]:
        """List events, newest first; ``active_only`` keeps events dated today or later."""
        limit = max(1, min(int(limit), DEFAULT_EVENTS_LIMIT * 4))
        from_date = (today or now_utc().date()) if active_only else None
        return self._events.list(from_date=from_date, limit=limit)
