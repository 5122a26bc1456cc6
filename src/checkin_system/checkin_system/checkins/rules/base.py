from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendees.model import Attendee
from ...core.enums import CheckInType
from ...core.exceptions import NotEntitled


class EntitlementRule(ABC):
    """Strategy Pattern: decide whether an attendee may redeem one check-in type."""

    check_in_type: CheckInType

    @abstractmethod
    def permits(self, attendee: Attendee) -> bool:
        raise NotImplementedError

    def enforce(self, attendee: Attendee) -> None:
        if not self.permits(attendee):
            raise NotEntitled(self.check_in_type.value)
