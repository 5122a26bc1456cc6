from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..checkins.repository import CheckInRepository
from ..common.datetime_utils import now_utc
from ..common.validators import (
    require_bool,
    require_email,
    require_length,
    require_non_empty,
    require_phone,
    sanitize_input,
)
from ..core.constants import (
    BADGE_UID_MAX_ATTEMPTS,
    DEFAULT_ADMIN_PAGE_SIZE,
    DEFAULT_BADGE_PRINT_TEMPLATE,
    DEFAULT_SEARCH_LIMIT,
    MAX_INPUT_LENGTH,
    MAX_SEARCH_LIMIT,
)
from ..core.exceptions import AttendeeNotFound, DuplicateRegistration, EventNotFound, StoreUnavailable, ValidationError
from ..database.errors import UQ_ATTENDEE_BADGE, UQ_ATTENDEE_EVENT_EMAIL, DuplicateKeyError
from ..events.repository import EventRepository
from .model import Attendee, AttendeeDetail, AttendeePage, RegistrationResult
from .repository import AttendeeRepository

logger = logging.getLogger(__name__)


def _validate_full_name(value: object) -> str:
    return require_length(sanitize_input(value), "full_name", min_len=2, max_len=255)


def _validate_email(value: object) -> str:
    email = require_length(sanitize_input(value), "email", min_len=1, max_len=254)
    return require_email(email)


def _validate_phone(value: object) -> str:
    phone = require_length(sanitize_input(value), "phone", min_len=10, max_len=20)
    return require_phone(phone)


def _validate_institution(value: object) -> str:
    return require_length(sanitize_input(value), "institution", min_len=2, max_len=255)


def _validate_category(value: object) -> str:
    return require_non_empty(sanitize_input(value), "category")


def _validate_notes(value: object) -> Optional[str]:
    notes = sanitize_input(value)
    return require_length(notes, "notes", max_len=MAX_INPUT_LENGTH) if notes else None


# field name -> validator used by admin updates
_FIELD_VALIDATORS: Dict[str, Callable[[object], Any]] = {
    "full_name": _validate_full_name,
    "email": _validate_email,
    "phone": _validate_phone,
    "institution": _validate_institution,
    "category": _validate_category,
    "notes": _validate_notes,
    "meal_entitled": lambda v: require_bool(v, "meal_entitled"),
    "kit_entitled": lambda v: require_bool(v, "kit_entitled"),
}


class AttendeeService:
    def __init__(
        self,
        attendees: AttendeeRepository,
        events: EventRepository,
        check_ins: CheckInRepository,
        *,
        generate_badge_uid: Callable[[], str],
        badge_print_template: str = DEFAULT_BADGE_PRINT_TEMPLATE,
        max_badge_attempts: int = BADGE_UID_MAX_ATTEMPTS,
    ):
        self._attendees = attendees
        self._events = events
        self._check_ins = check_ins
        self._generate_badge_uid = generate_badge_uid
        self._badge_print_template = badge_print_template
        self._max_badge_attempts = max(1, int(max_badge_attempts))

    # ----- registration -----

    def register_attendee(
        self,
        *,
        event_id: object,
        full_name: object,
        email: object,
        phone: object,
        institution: object,
        category: object,
        meal_entitled: object = False,
        kit_entitled: object = False,
        notes: object = None,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        fields = {
            "full_name": _validate_full_name(full_name),
            "email": _validate_email(email),
            "phone": _validate_phone(phone),
            "institution": _validate_institution(institution),
            "category": _validate_category(category),
            "meal_entitled": bool(meal_entitled),
            "kit_entitled": bool(kit_entitled),
            "notes": _validate_notes(notes),
            "badge_print_template": self._badge_print_template,
        }
        event_id = self._parse_id(event_id, "event_id")

        event = self._events.get_by_id(event_id)
        if not event:
            raise EventNotFound(event_id)
        fields["event_id"] = event.id

        if self._attendees.get_by_event_email(event_id=event.id, email=fields["email"]):
            raise DuplicateRegistration()

        attendee = self._insert_with_unique_badge(fields, now=now or now_utc())
        logger.info(
            "Registration successful: attendee_id=%s badge=%s event=%s",
            attendee.id,
            attendee.badge_uid,
            event.event_code,
        )
        return RegistrationResult(
            badge_uid=attendee.badge_uid,
            attendee_name=attendee.full_name,
            event_name=event.event_name,
            event_code=event.event_code,
        )

    def _insert_with_unique_badge(self, fields: Dict[str, Any], *, now: datetime) -> Attendee:
        for attempt in range(1, self._max_badge_attempts + 1):
            candidate = {**fields, "badge_uid": self._generate_badge_uid()}
            try:
                return self._attendees.create(fields=candidate, now=now)
            except DuplicateKeyError as exc:
                if exc.constraint == UQ_ATTENDEE_EVENT_EMAIL:
                    raise DuplicateRegistration() from exc
                if exc.constraint != UQ_ATTENDEE_BADGE:
                    logger.error("Unexpected unique key conflict on attendee insert: %s", exc.constraint)
                    raise StoreUnavailable() from exc
                logger.warning("Badge UID collision (attempt %d/%d)", attempt, self._max_badge_attempts)

        logger.error("Could not allocate a unique badge UID after %d attempts", self._max_badge_attempts)
        raise StoreUnavailable()

    # ----- lookups -----

    def get_attendee(self, attendee_id: object) -> Attendee:
        attendee = self._attendees.get_by_id(self._parse_id(attendee_id, "id"))
        if not attendee:
            raise AttendeeNotFound()
        return attendee

    def get_by_badge(self, badge_uid: object) -> Attendee:
        uid = sanitize_input(badge_uid).upper()
        if not uid:
            raise ValidationError("Badge UID is required", {"badge_uid": "required"})
        attendee = self._attendees.get_by_badge(uid)
        if not attendee:
            raise AttendeeNotFound(uid)
        return attendee

    def lookup_by_badge(self, badge_uid: object) -> AttendeeDetail:
        attendee = self.get_by_badge(badge_uid)
        return AttendeeDetail(
            attendee=attendee,
            event=self._events.get_by_id(attendee.event_id),
            check_ins=tuple(self._check_ins.list_for_attendee(attendee.id)),
        )

    def search(self, *, query: object, event_id: object = None, limit: object = DEFAULT_SEARCH_LIMIT) -> Sequence[AttendeeDetail]:
        text = sanitize_input(query)
        if not text:
            raise ValidationError("Search query is required", {"query": "required"})
        found = self._attendees.search(
            query=text,
            event_id=self._parse_optional_id(event_id, "event_id"),
            limit=self._parse_limit(limit, default=DEFAULT_SEARCH_LIMIT, maximum=MAX_SEARCH_LIMIT),
        )
        return self._with_details(found)

    def list_admin(
        self,
        *,
        event_id: object = None,
        search: object = None,
        limit: object = DEFAULT_ADMIN_PAGE_SIZE,
        offset: object = 0,
    ) -> AttendeePage:
        limit_i = self._parse_limit(limit, default=DEFAULT_ADMIN_PAGE_SIZE, maximum=1000)
        try:
            offset_i = max(0, int(offset or 0))
        except (TypeError, ValueError):
            raise ValidationError("offset must be a number", {"offset": "invalid_number"}) from None

        items, total = self._attendees.list_page(
            event_id=self._parse_optional_id(event_id, "event_id"),
            search=sanitize_input(search) or None,
            limit=limit_i,
            offset=offset_i,
        )
        return AttendeePage(items=self._with_details(items), total=total, limit=limit_i, offset=offset_i)

    def _with_details(self, attendees: Sequence[Attendee]) -> Sequence[AttendeeDetail]:
        if not attendees:
            return []
        history = self._check_ins.list_for_attendees([a.id for a in attendees])
        events = {}
        for event_id in {a.event_id for a in attendees}:
            events[event_id] = self._events.get_by_id(event_id)
        return [
            AttendeeDetail(attendee=a, event=events.get(a.event_id), check_ins=tuple(history.get(a.id, ())))
            for a in attendees
        ]

    # ----- admin mutations -----

    def update_attendee(self, attendee_id: object, changes: Mapping[str, Any], *, now: Optional[datetime] = None) -> Attendee:
        """Replace the provided fields. badge_uid and event_id are never changed."""
        target_id = self._parse_id(attendee_id, "id")

        cleaned: Dict[str, Any] = {}
        for name, validator in _FIELD_VALIDATORS.items():
            if name in changes and changes[name] is not None:
                cleaned[name] = validator(changes[name])

        try:
            attendee = self._attendees.update(target_id, fields=cleaned, now=now or now_utc())
        except DuplicateKeyError as exc:
            if exc.constraint == UQ_ATTENDEE_EVENT_EMAIL:
                raise DuplicateRegistration("Another attendee of this event already uses that email") from exc
            raise StoreUnavailable() from exc
        if not attendee:
            raise AttendeeNotFound()

        logger.info("Attendee updated: id=%s badge=%s fields=%s", attendee.id, attendee.badge_uid, sorted(cleaned))
        return attendee

    def delete_attendee(self, attendee_id: object) -> Attendee:
        attendee = self.get_attendee(attendee_id)
        if not self._attendees.delete(attendee.id):
            raise AttendeeNotFound()
        logger.info("Attendee deleted: id=%s badge=%s", attendee.id, attendee.badge_uid)
        return attendee

    # ----- helpers -----

    @staticmethod
    def _parse_id(value: object, field_name: str) -> int:
        if isinstance(value, bool):
            raise ValidationError(f"{field_name} is invalid", {field_name: "invalid_id"})
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} is invalid", {field_name: "invalid_id"}) from None
        if parsed <= 0:
            raise ValidationError(f"{field_name} is invalid", {field_name: "invalid_id"})
        return parsed

    @classmethod
    def _parse_optional_id(cls, value: object, field_name: str) -> Optional[int]:
        if value is None or value == "":
            return None
        return cls._parse_id(value, field_name)

    @staticmethod
    def _parse_limit(value: object, *, default: int, maximum: int) -> int:
        if value is None or value == "":
            return default
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ValidationError("limit must be a number", {"limit": "invalid_number"}) from None
        if parsed < 1 or parsed > maximum:
            raise ValidationError(f"limit must be between 1 and {maximum}", {"limit": "out_of_range"})
        return parsed
