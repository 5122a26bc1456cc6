from __future__ import annotations

from enum import Enum


class CheckInType(str, Enum):
    """Closed set of check-in categories."""

    MEAL = "meal"
    KIT = "kit"
    GENERAL = "general"


class AnalyticsPeriod(str, Enum):
    ONE_DAY = "1d"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"
    ONE_YEAR = "1y"


class StoreBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
