from __future__ import annotations

# Unique key names shared by database/schema.sql and the in-memory store.
UQ_EVENT_CODE = "uq_events_event_code"
UQ_ATTENDEE_BADGE = "uq_attendees_badge_uid"
UQ_ATTENDEE_EVENT_EMAIL = "uq_attendees_event_email"
UQ_CHECKIN_ATTENDEE_TYPE = "uq_check_ins_attendee_type"


class DuplicateKeyError(Exception):
    """A write hit a unique constraint.

    Stays inside the repository/service boundary: services translate it into
    a domain error (or a retry) and it never reaches a caller.
    """

    def __init__(self, constraint: str):
        super().__init__(f"duplicate key for {constraint}")
        self.constraint = constraint
