from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from src.checkin_system.checkin_system.badges import qr_codec
from src.checkin_system.checkin_system.core.exceptions import QRDecodeInvalid


def test_encode_shape_with_event_code():
    now = datetime(2025, 12, 1, 9, 0, tzinfo=timezone.utc)

    data = json.loads(qr_codec.encode("REGABC123", "CONF2025", now=now))

    assert data == {
        "type": "badge",
        "badge_uid": "REGABC123",
        "event_code": "CONF2025",
        "timestamp": 1764579600000,
        "version": "1.0",
    }


def test_encode_omits_missing_event_code():
    data = json.loads(qr_codec.encode("REGABC123"))

    assert "event_code" not in data
    assert isinstance(data["timestamp"], int)


@pytest.mark.parametrize("event_code", [None, "CONF2025"])
def test_round_trip(event_code):
    payload = qr_codec.encode("REGMIMW1U00X1Y2Z3", event_code)

    decoded = qr_codec.decode(payload)

    assert decoded is not None
    assert decoded.badge_uid == "REGMIMW1U00X1Y2Z3"
    assert decoded.event_code == event_code
    assert decoded.version == "1.0"
    assert qr_codec.is_valid(payload)


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        '{"type":"other","badge_uid":"X"}',
        '{"type":"badge"}',
        '{"type":"badge","badge_uid":""}',
        '{"type":"badge","badge_uid":42}',
        '["badge","REG1"]',
        '"badge"',
        "null",
        "",
        None,
        12345,
        b"\xff\xfe\xfd",
        "[" * 100000,
        '{"type":"badge","badge_uid":"REG1"' + "}" * 3,
    ],
)
def test_decode_rejects_without_raising(payload):
    assert qr_codec.decode(payload) is None
    assert qr_codec.is_valid(payload) is False


def test_decode_accepts_bytes_and_keeps_unknown_fields():
    raw = b'{"type":"badge","badge_uid":"REG1","seat":"A12","timestamp":1}'

    decoded = qr_codec.decode(raw)

    assert decoded.badge_uid == "REG1"
    assert decoded.timestamp == 1
    assert decoded.extra == {"seat": "A12"}
    assert decoded.to_dict()["seat"] == "A12"


def test_decode_or_raise():
    with pytest.raises(QRDecodeInvalid) as exc:
        qr_codec.decode_or_raise("garbage")
    assert exc.value.message == "Invalid code, please rescan"

    assert qr_codec.decode_or_raise(qr_codec.encode("REG1")).badge_uid == "REG1"


def test_decode_keeps_optional_fields_with_unexpected_types():
    decoded = qr_codec.decode('{"type":"badge","badge_uid":"X","event_code":123,"timestamp":"soon","version":1}')

    assert decoded.badge_uid == "X"
    assert decoded.event_code is None
    assert decoded.timestamp is None
    assert decoded.extra == {"event_code": 123, "timestamp": "soon", "version": 1}
    assert decoded.to_dict() == {
        "type": "badge",
        "badge_uid": "X",
        "event_code": 123,
        "timestamp": "soon",
        "version": 1,
    }
