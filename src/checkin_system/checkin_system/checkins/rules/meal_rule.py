from __future__ import annotations

from ...attendees.model import Attendee
from ...core.enums import CheckInType
from .base import EntitlementRule


class MealEntitlementRule(EntitlementRule):
    """Meals require meal_entitled."""

    check_in_type = CheckInType.MEAL

    def permits(self, attendee: Attendee) -> bool:
        return bool(attendee.meal_entitled)
