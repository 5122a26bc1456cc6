from __future__ import annotations

from ...attendees.model import Attendee
from ...core.enums import CheckInType
from .base import EntitlementRule


class OpenEntitlementRule(EntitlementRule):
    """General attendance is open to every registered attendee."""

    check_in_type = CheckInType.GENERAL

    def permits(self, attendee: Attendee) -> bool:
        return True
