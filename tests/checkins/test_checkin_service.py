from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from src.checkin_system.checkin_system.badges import qr_codec
from src.checkin_system.checkin_system.checkins.memory_checkin_repository import MemoryCheckInRepository
from src.checkin_system.checkin_system.checkins.service import CheckInService, badge_uid_from_scan
from src.checkin_system.checkin_system.core.enums import CheckInType
from src.checkin_system.checkin_system.core.exceptions import (
    AlreadyCheckedIn,
    AttendeeNotFound,
    NotEntitled,
    QRDecodeInvalid,
    StoreUnavailable,
    ValidationError,
)
from src.checkin_system.checkin_system.database.errors import UQ_CHECKIN_ATTENDEE_TYPE, DuplicateKeyError


@pytest.fixture
def badge_uid(container, registration_payload, fixed_now) -> str:
    return container.attendee_service.register_attendee(**registration_payload, now=fixed_now).badge_uid


def test_meal_check_in_then_duplicate_then_kit_not_entitled(container, badge_uid, fixed_now):
    service = container.check_in_service

    result = service.check_in(badge_uid, "meal", performer="desk-1", location="Hall A", now=fixed_now)
    assert result.to_dict() == {
        "attendee_name": "Dr. John Smith",
        "check_in_type": "meal",
        "checked_in_at": "2025-12-01T09:30:00",
    }

    with pytest.raises(AlreadyCheckedIn) as dup:
        service.check_in(badge_uid, "meal", now=fixed_now + timedelta(minutes=5))
    assert dup.value.to_dict() == {"error": "Already checked in for meal", "code": "ALREADY_CHECKED_IN", "check_in_type": "meal"}

    with pytest.raises(NotEntitled):
        service.check_in(badge_uid, "kit", now=fixed_now)

    assert service.check_in(badge_uid, "general", now=fixed_now).check_in_type is CheckInType.GENERAL

    history = container.check_ins_repo.list_for_attendee(container.attendees_repo.get_by_badge(badge_uid).id)
    assert [ci.check_in_type for ci in history] == [CheckInType.MEAL, CheckInType.GENERAL]
    assert history[0].checked_in_by == "desk-1"
    assert history[0].location == "Hall A"


def test_defaults_for_performer_and_location(container, badge_uid, fixed_now):
    container.check_in_service.check_in(badge_uid, "general", performer="  ", now=fixed_now)

    (record,) = container.check_ins_repo.list_recorded()
    assert record.checked_in_by == "system"
    assert record.location == "main"


def test_badge_uid_is_case_insensitive(container, badge_uid, fixed_now):
    result = container.check_in_service.check_in(badge_uid.lower(), "general", now=fixed_now)

    assert result.attendee_name == "Dr. John Smith"


def test_unknown_badge(container, event, fixed_now):
    with pytest.raises(AttendeeNotFound):
        container.check_in_service.check_in("REGDOESNOTEXIST", "general", now=fixed_now)


def test_invalid_type_is_rejected_before_lookup(container):
    with pytest.raises(ValidationError):
        container.check_in_service.check_in("REGDOESNOTEXIST", "lunch")


def test_missing_badge_uid(container):
    with pytest.raises(ValidationError) as exc:
        container.check_in_service.check_in("", "general")
    assert exc.value.fields == {"badge_uid": "required"}


def test_check_in_by_scan_with_payload_and_bare_uid(container, badge_uid, fixed_now):
    service = container.check_in_service

    first = service.check_in_by_scan(qr_codec.encode(badge_uid, "CONF2025"), "meal", now=fixed_now)
    assert first.check_in_type is CheckInType.MEAL

    second = service.check_in_by_scan(f"  {badge_uid.lower()}\n", now=fixed_now)
    assert second.check_in_type is CheckInType.GENERAL


@pytest.mark.parametrize("payload", ["{not json", "hello world!", '{"type":"badge"}', None, ""])
def test_badge_uid_from_scan_rejects_garbage(payload):
    with pytest.raises(QRDecodeInvalid):
        badge_uid_from_scan(payload)


def test_concurrent_check_ins_record_exactly_one(container, badge_uid, fixed_now):
    service = container.check_in_service
    outcomes = []
    lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            service.check_in(badge_uid, "meal", now=fixed_now)
            outcome = "ok"
        except AlreadyCheckedIn:
            outcome = "dup"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("dup") == 7
    assert len(container.check_ins_repo.list_recorded()) == 1


class _RacingCheckInRepository(MemoryCheckInRepository):
    """Reports no prior check-in, then loses the insert race."""

    def __init__(self, store, constraint):
        super().__init__(store)
        self._constraint = constraint

    def exists(self, *, attendee_id, check_in_type):
        return False

    def create(self, **kwargs):
        raise DuplicateKeyError(self._constraint)


def test_lost_insert_race_maps_to_already_checked_in(container, badge_uid):
    repo = _RacingCheckInRepository(container.memory_store, UQ_CHECKIN_ATTENDEE_TYPE)
    service = CheckInService(repo, container.attendees_repo)

    with pytest.raises(AlreadyCheckedIn):
        service.check_in(badge_uid, "meal")


def test_unexpected_constraint_is_a_store_failure(container, badge_uid):
    repo = _RacingCheckInRepository(container.memory_store, "uq_something_else")
    service = CheckInService(repo, container.attendees_repo)

    with pytest.raises(StoreUnavailable):
        service.check_in(badge_uid, "general")


def test_revoked_entitlement_wins_over_check_in_history(container, badge_uid, fixed_now):
    service = container.check_in_service
    service.check_in(badge_uid, "meal", now=fixed_now)
    attendee = container.attendees_repo.get_by_badge(badge_uid)

    container.attendee_service.update_attendee(attendee.id, {"meal_entitled": False})

    with pytest.raises(NotEntitled):
        service.check_in(badge_uid, "meal", now=fixed_now + timedelta(minutes=1))
    assert len(container.check_ins_repo.list_for_attendee(attendee.id)) == 1
