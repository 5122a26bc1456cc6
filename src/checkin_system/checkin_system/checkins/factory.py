from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import CheckInType
from ..core.exceptions import ValidationError
from .rules.base import EntitlementRule
from .rules.kit_rule import KitEntitlementRule
from .rules.meal_rule import MealEntitlementRule
from .rules.open_rule import OpenEntitlementRule


def parse_check_in_type(value: object) -> CheckInType:
    if isinstance(value, CheckInType):
        return value
    try:
        return CheckInType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            "check_in_type must be one of: meal, kit, general",
            {"check_in_type": "invalid_choice"},
        ) from None


@dataclass
class EntitlementRuleFactory:
    """Factory Pattern: pick the entitlement rule for a check-in type."""

    def for_type(self, check_in_type: CheckInType) -> EntitlementRule:
        if check_in_type == CheckInType.MEAL:
            return MealEntitlementRule()
        if check_in_type == CheckInType.KIT:
            return KitEntitlementRule()
        return OpenEntitlementRule()
