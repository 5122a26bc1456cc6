from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from .model import Attendee


class AttendeeRepository(Protocol):
    def get_by_id(self, attendee_id: int) -> Optional[Attendee]:
        raise NotImplementedError

    def get_by_badge(self, badge_uid: str) -> Optional[Attendee]:
        raise NotImplementedError

    def get_by_event_email(self, *, event_id: int, email: str) -> Optional[Attendee]:
        raise NotImplementedError

    def create(self, *, fields: Mapping[str, Any], now: datetime) -> Attendee:
        """Insert an attendee row.

        Raises DuplicateKeyError on a badge_uid or (event_id, email) conflict.
        """

        raise NotImplementedError

    def search(self, *, query: str, event_id: Optional[int] = None, limit: int = 20) -> Sequence[Attendee]:
        """Case-insensitive contains-match on full_name, email or badge_uid."""

        raise NotImplementedError

    def list_page(
        self,
        *,
        event_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[Sequence[Attendee], int]:
        """Newest first. Returns (page, total matching)."""

        raise NotImplementedError

    def update(self, attendee_id: int, *, fields: Mapping[str, Any], now: datetime) -> Optional[Attendee]:
        raise NotImplementedError

    def delete(self, attendee_id: int) -> bool:
        """Delete an attendee; its check-ins go with it."""

        raise NotImplementedError

    def list_created_since(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[Attendee]:
        raise NotImplementedError

    def count_by_event(self, event_ids: Sequence[int]) -> Dict[int, int]:
        raise NotImplementedError
