from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from ..core.enums import CheckInType
from .model import CheckIn


class CheckInRepository(Protocol):
    """Check-ins are append-only: no update method, deletion only by cascade."""

    def exists(self, *, attendee_id: int, check_in_type: CheckInType) -> bool:
        raise NotImplementedError

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
        """Record a check-in.

        Raises DuplicateKeyError when (attendee_id, check_in_type) already exists.
        This insert is the single decision point for concurrent check-ins.
        """

        raise NotImplementedError

    def list_for_attendee(self, attendee_id: int) -> Sequence[CheckIn]:
        raise NotImplementedError

    def list_for_attendees(self, attendee_ids: Sequence[int]) -> Dict[int, List[CheckIn]]:
        raise NotImplementedError

    def list_recorded(self, *, since: Optional[datetime] = None, event_id: Optional[int] = None) -> Sequence[CheckIn]:
        """Check-ins newest first, optionally bounded by time and event."""

        raise NotImplementedError
