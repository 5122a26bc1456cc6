from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..attendees.model import Attendee
from ..attendees.repository import AttendeeRepository
from ..badges import qr_codec
from ..common.datetime_utils import now_utc
from ..common.validators import is_valid_badge_uid, sanitize_input
from ..core.constants import DEFAULT_LOCATION, DEFAULT_PERFORMER
from ..core.enums import CheckInType
from ..core.exceptions import AlreadyCheckedIn, AttendeeNotFound, QRDecodeInvalid, StoreUnavailable, ValidationError
from ..database.errors import UQ_CHECKIN_ATTENDEE_TYPE, DuplicateKeyError
from .factory import EntitlementRuleFactory, parse_check_in_type
from .model import CheckInResult
from .repository import CheckInRepository

logger = logging.getLogger(__name__)

_SHORT_FIELD_MAX = 100


def _short_text(value: object, default: str) -> str:
    return sanitize_input(value)[:_SHORT_FIELD_MAX] or default


def badge_uid_from_scan(payload: object) -> str:
    """Badge UID from scanned text: a badge QR payload, or a bare UID (printed labels).

    Raises QRDecodeInvalid for anything else.
    """
    decoded = qr_codec.decode(payload)
    if decoded is not None:
        return decoded.badge_uid

    if isinstance(payload, str):
        candidate = payload.strip().upper()
        if is_valid_badge_uid(candidate):
            return candidate
    raise QRDecodeInvalid()


class CheckInService:
    def __init__(
        self,
        check_ins: CheckInRepository,
        attendees: AttendeeRepository,
        *,
        rule_factory: Optional[EntitlementRuleFactory] = None,
    ):
        self._check_ins = check_ins
        self._attendees = attendees
        self._factory = rule_factory or EntitlementRuleFactory()

    def _find_attendee(self, badge_uid: object) -> Attendee:
        uid = sanitize_input(badge_uid).upper()
        if not uid:
            raise ValidationError("Badge UID is required", {"badge_uid": "required"})
        attendee = self._attendees.get_by_badge(uid)
        if not attendee:
            raise AttendeeNotFound(uid)
        return attendee

    def check_in(
        self,
        badge_uid: object,
        check_in_type: object,
        *,
        performer: object = None,
        location: object = None,
        notes: object = None,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        kind = parse_check_in_type(check_in_type)
        attendee = self._find_attendee(badge_uid)

        self._factory.for_type(kind).enforce(attendee)

        # Advisory only; the unique key on (attendee_id, check_in_type) decides races.
        if self._check_ins.exists(attendee_id=attendee.id, check_in_type=kind):
            raise AlreadyCheckedIn(kind.value)

        try:
            record = self._check_ins.create(
                attendee_id=attendee.id,
                check_in_type=kind,
                checked_in_at=now or now_utc(),
                checked_in_by=_short_text(performer, DEFAULT_PERFORMER),
                location=_short_text(location, DEFAULT_LOCATION),
                notes=sanitize_input(notes) or None,
            )
        except DuplicateKeyError as exc:
            if exc.constraint != UQ_CHECKIN_ATTENDEE_TYPE:
                logger.error("Unexpected unique key conflict on check-in insert: %s", exc.constraint)
                raise StoreUnavailable() from exc
            raise AlreadyCheckedIn(kind.value) from exc

        logger.info(
            "Check-in successful: attendee_id=%s badge=%s type=%s by=%s",
            attendee.id,
            attendee.badge_uid,
            kind.value,
            record.checked_in_by,
        )
        return CheckInResult(attendee_name=attendee.full_name, check_in_type=kind, checked_in_at=record.checked_in_at)

    def check_in_by_scan(
        self,
        payload: object,
        check_in_type: object = CheckInType.GENERAL,
        *,
        performer: object = None,
        location: object = None,
        notes: object = None,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        return self.check_in(
            badge_uid_from_scan(payload),
            check_in_type,
            performer=performer,
            location=location,
            notes=notes,
            now=now,
        )
