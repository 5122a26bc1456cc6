from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..attendees.repository import AttendeeRepository
from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import isoformat
from ..events.repository import EventRepository
from .service import AnalyticsReport


@dataclass(frozen=True)
class CsvTable:
    filename: str
    fieldnames: Sequence[str]
    rows: List[Dict[str, object]]


ATTENDEE_FIELDS = (
    "badge_uid",
    "full_name",
    "email",
    "phone",
    "category",
    "institution",
    "event_code",
    "event_name",
    "meal_entitled",
    "kit_entitled",
    "notes",
    "created_at",
)

CHECKIN_FIELDS = (
    "checked_in_at",
    "check_in_type",
    "badge_uid",
    "full_name",
    "event_code",
    "checked_in_by",
    "location",
    "notes",
)


class ExportService:
    """Flat rows for the admin CSV downloads."""

    def __init__(self, attendees: AttendeeRepository, check_ins: CheckInRepository, events: EventRepository):
        self._attendees = attendees
        self._check_ins = check_ins
        self._events = events

    def _event_lookup(self, event_ids) -> Dict[int, object]:
        return {event_id: self._events.get_by_id(event_id) for event_id in set(event_ids)}

    def attendees_table(self, *, event_id: Optional[int] = None) -> CsvTable:
        attendees = self._attendees.list_created_since(event_id=event_id)
        events = self._event_lookup(a.event_id for a in attendees)
        rows = []
        for a in attendees:
            event = events.get(a.event_id)
            rows.append(
                {
                    "badge_uid": a.badge_uid,
                    "full_name": a.full_name,
                    "email": a.email or "",
                    "phone": a.phone or "",
                    "category": a.category,
                    "institution": a.institution or "",
                    "event_code": event.event_code if event else "",
                    "event_name": event.event_name if event else "",
                    "meal_entitled": "yes" if a.meal_entitled else "no",
                    "kit_entitled": "yes" if a.kit_entitled else "no",
                    "notes": a.notes or "",
                    "created_at": isoformat(a.created_at) or "",
                }
            )
        return CsvTable(filename="attendees.csv", fieldnames=ATTENDEE_FIELDS, rows=rows)

    def check_ins_table(self, *, event_id: Optional[int] = None) -> CsvTable:
        check_ins = self._check_ins.list_recorded(event_id=event_id)
        attendees = {a.id: a for a in self._attendees.list_created_since(event_id=event_id)}
        events = self._event_lookup(a.event_id for a in attendees.values())
        rows = []
        for ci in check_ins:
            attendee = attendees.get(ci.attendee_id)
            event = events.get(attendee.event_id) if attendee else None
            rows.append(
                {
                    "checked_in_at": isoformat(ci.checked_in_at),
                    "check_in_type": ci.check_in_type.value,
                    "badge_uid": attendee.badge_uid if attendee else "",
                    "full_name": attendee.full_name if attendee else "",
                    "event_code": event.event_code if event else "",
                    "checked_in_by": ci.checked_in_by,
                    "location": ci.location,
                    "notes": ci.notes or "",
                }
            )
        return CsvTable(filename="checkins.csv", fieldnames=CHECKIN_FIELDS, rows=rows)

    @staticmethod
    def analytics_table(report: AnalyticsReport) -> CsvTable:
        """One metric per row: section, metric, value."""
        data = report.to_dict()
        rows: List[Dict[str, object]] = []

        def add(section: str, metric: str, value: object) -> None:
            rows.append({"section": section, "metric": metric, "value": value})

        for key, value in data["overview"].items():
            add("overview", key, value)
        for key, value in data["checkInBreakdown"].items():
            add("checkInBreakdown", key, value)
        for key, value in sorted(data["categoryBreakdown"].items()):
            add("categoryBreakdown", key, value)
        for key, value in data["entitlementsBreakdown"].items():
            add("entitlementsBreakdown", key, value)
        for day in data["dailyStats"]:
            add("dailyRegistrations", day["date"], day["registrations"])
            add("dailyCheckIns", day["date"], day["checkIns"])
        for event in data["topEvents"]:
            add("topEvents", event["name"], event["attendeeCount"])

        return CsvTable(filename=f"analytics_{report.period.value}.csv", fieldnames=("section", "metric", "value"), rows=rows)
