from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from ..attendees.repository import AttendeeRepository
from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import isoformat, now_utc
from ..core.constants import TOP_EVENTS_LIMIT
from ..core.enums import AnalyticsPeriod, CheckInType
from ..events.repository import EventRepository

logger = logging.getLogger(__name__)

_PERIOD_DAYS = {
    AnalyticsPeriod.ONE_DAY: 1,
    AnalyticsPeriod.SEVEN_DAYS: 7,
    AnalyticsPeriod.THIRTY_DAYS: 30,
    AnalyticsPeriod.NINETY_DAYS: 90,
}


def parse_period(value: object) -> AnalyticsPeriod:
    """Unknown or missing periods fall back to 7d."""
    try:
        return AnalyticsPeriod(str(value)) if value else AnalyticsPeriod.SEVEN_DAYS
    except ValueError:
        return AnalyticsPeriod.SEVEN_DAYS


def period_start(period: AnalyticsPeriod, now: datetime) -> datetime:
    if period == AnalyticsPeriod.ONE_YEAR:
        try:
            return now.replace(year=now.year - 1)
        except ValueError:
            # Feb 29
            return now.replace(year=now.year - 1, day=28)
    return now - timedelta(days=_PERIOD_DAYS[period])


@dataclass(frozen=True)
class DailyStat:
    day: date
    registrations: int
    check_ins: int


@dataclass(frozen=True)
class TopEvent:
    id: int
    name: str
    event_date: date
    attendee_count: int


@dataclass(frozen=True)
class AnalyticsReport:
    period: AnalyticsPeriod
    start: datetime
    total_attendees: int
    total_check_ins: int
    total_events: int
    check_in_breakdown: Dict[str, int]
    category_breakdown: Dict[str, int]
    meal_entitled: int
    kit_entitled: int
    both_entitled: int
    daily_stats: Sequence[DailyStat] = field(default_factory=list)
    top_events: Sequence[TopEvent] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "overview": {
                "totalAttendees": self.total_attendees,
                "totalCheckIns": self.total_check_ins,
                "totalEvents": self.total_events,
                "period": self.period.value,
            },
            "checkInBreakdown": dict(self.check_in_breakdown),
            "categoryBreakdown": dict(self.category_breakdown),
            "entitlementsBreakdown": {
                "mealEntitled": self.meal_entitled,
                "kitEntitled": self.kit_entitled,
                "bothEntitled": self.both_entitled,
            },
            "dailyStats": [
                {"date": isoformat(d.day), "registrations": d.registrations, "checkIns": d.check_ins}
                for d in self.daily_stats
            ],
            "topEvents": [
                {"id": e.id, "name": e.name, "date": isoformat(e.event_date), "attendeeCount": e.attendee_count}
                for e in self.top_events
            ],
        }


class AnalyticsService:
    def __init__(self, attendees: AttendeeRepository, check_ins: CheckInRepository, events: EventRepository):
        self._attendees = attendees
        self._check_ins = check_ins
        self._events = events

    def build_analytics(
        self,
        *,
        period: object = AnalyticsPeriod.SEVEN_DAYS,
        event_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        now = now or now_utc()
        period = parse_period(period.value if isinstance(period, AnalyticsPeriod) else period)
        start = period_start(period, now)

        attendees = self._attendees.list_created_since(since=start, event_id=event_id)
        check_ins = self._check_ins.list_recorded(since=start, event_id=event_id)
        events = self._events.list_created_since(since=start, event_id=event_id)

        by_type = Counter(ci.check_in_type for ci in check_ins)
        report = AnalyticsReport(
            period=period,
            start=start,
            total_attendees=len(attendees),
            total_check_ins=len(check_ins),
            total_events=len(events),
            check_in_breakdown={t.value: by_type.get(t, 0) for t in CheckInType},
            category_breakdown=dict(Counter(a.category for a in attendees)),
            meal_entitled=sum(1 for a in attendees if a.meal_entitled),
            kit_entitled=sum(1 for a in attendees if a.kit_entitled),
            both_entitled=sum(1 for a in attendees if a.meal_entitled and a.kit_entitled),
            daily_stats=self._daily_stats(start, now, attendees, check_ins),
            top_events=self._top_events(events),
        )
        logger.info(
            "Analytics built: period=%s event_id=%s attendees=%d check_ins=%d",
            period.value,
            event_id,
            report.total_attendees,
            report.total_check_ins,
        )
        return report

    @staticmethod
    def _daily_stats(start: datetime, now: datetime, attendees, check_ins) -> List[DailyStat]:
        registrations = Counter(a.created_at.date() for a in attendees if a.created_at)
        redeemed = Counter(ci.checked_in_at.date() for ci in check_ins)

        days: List[DailyStat] = []
        current = start.date()
        while current <= now.date():
            days.append(DailyStat(day=current, registrations=registrations.get(current, 0), check_ins=redeemed.get(current, 0)))
            current += timedelta(days=1)
        return days

    def _top_events(self, events) -> List[TopEvent]:
        top = list(events)[:TOP_EVENTS_LIMIT]
        counts = self._attendees.count_by_event([e.id for e in top])
        return [
            TopEvent(id=e.id, name=e.event_name, event_date=e.event_date, attendee_count=counts.get(e.id, 0))
            for e in top
        ]
