from __future__ import annotations

from ...attendees.model import Attendee
from ...core.enums import CheckInType
from .base import EntitlementRule


class KitEntitlementRule(EntitlementRule):
    """Kits require kit_entitled."""

    check_in_type = CheckInType.KIT

    def permits(self, attendee: Attendee) -> bool:
        return bool(attendee.kit_entitled)
