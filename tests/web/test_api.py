from __future__ import annotations

import json

import pytest

from src.checkin_system.checkin_system.badges import qr_codec
from src.checkin_system.checkin_system.container import build_container
from src.checkin_system.checkin_system.database.memory_store import MemoryStore
from src.checkin_system.checkin_system.ratelimit.limiter import FixedWindowRateLimiter


def _register(client, payload):
    return client.post("/api/register", json=payload)


@pytest.fixture
def badge_uid(client, registration_payload) -> str:
    resp = _register(client, registration_payload)
    assert resp.status_code == 200
    return resp.get_json()["badge_uid"]


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "healthy"
    assert body["services"]["database"]["status"] == "healthy"
    assert body["environment"] == "development"


def test_health_reports_unhealthy_store(app, container, monkeypatch):
    from src.checkin_system.checkin_system.core.exceptions import StoreUnavailable

    def fail():
        raise StoreUnavailable()

    monkeypatch.setattr(container.memory_store, "ping", fail)

    resp = app.test_client().get("/api/health")

    assert resp.status_code == 503
    assert resp.get_json()["status"] == "unhealthy"


def test_create_and_list_events(client, event):
    created = client.post("/api/events", json={"event_code": "SUMMIT26", "event_name": "Summit", "event_date": "2026-03-15"})
    assert created.status_code == 201
    assert created.get_json()["data"]["event_code"] == "SUMMIT26"

    dup = client.post("/api/events", json={"event_code": "SUMMIT26", "event_name": "Summit", "event_date": "2026-03-15"})
    assert dup.status_code == 409
    assert dup.get_json() == {"success": False, "error": "Event code already exists", "code": "DUPLICATE_EVENT_CODE"}

    listed = client.get("/api/events").get_json()["data"]
    assert [e["event_code"] for e in listed] == ["SUMMIT26", "CONF2025"]
    assert listed[1]["attendee_count"] == 0


def test_register_success_and_duplicate(client, registration_payload):
    resp = _register(client, registration_payload)
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["attendee_name"] == "Dr. John Smith"
    assert body["event_name"] == "Medical Conference 2025"
    assert body["badge_uid"].startswith("REG")

    again = _register(client, registration_payload)
    assert again.status_code == 409
    assert again.get_json()["error"] == "You are already registered for this event"


def test_register_validation_and_unknown_event(client, registration_payload):
    bad = _register(client, {**registration_payload, "email": "nope"})
    assert bad.status_code == 400
    assert bad.get_json()["fields"] == {"email": "invalid_email"}

    missing = _register(client, {**registration_payload, "event_id": 999})
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Event not found"


def test_post_requires_json_content_type(client, registration_payload):
    resp = client.post("/api/register", data=json.dumps(registration_payload), content_type="text/plain")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Content-Type must be application/json"


def test_origin_and_csrf_guards(app, client, registration_payload):
    app.config["ALLOWED_ORIGINS"] = ("https://checkin.example.org",)
    app.config["REQUIRE_CSRF"] = True

    foreign = client.post("/api/register", json=registration_payload, headers={"Origin": "https://evil.test"})
    assert foreign.status_code == 403
    assert foreign.get_json()["error"] == "Origin not allowed"

    no_token = client.post("/api/register", json=registration_payload, headers={"Origin": "https://checkin.example.org"})
    assert no_token.status_code == 403
    assert no_token.get_json()["error"] == "CSRF token required"

    ok = client.post(
        "/api/register",
        json=registration_payload,
        headers={"Origin": "https://checkin.example.org", "x-csrf-token": "t"},
    )
    assert ok.status_code == 200


def test_check_in_flow(client, badge_uid):
    meal = client.post("/api/checkin", json={"badge_uid": badge_uid, "check_in_type": "meal", "checked_in_by": "desk-1"})
    assert meal.status_code == 200
    assert meal.get_json()["message"] == "Check-in successful"
    assert meal.get_json()["data"]["attendee_name"] == "Dr. John Smith"

    again = client.post("/api/checkin", json={"badge_uid": badge_uid, "check_in_type": "meal"})
    assert again.status_code == 409
    assert again.get_json()["check_in_type"] == "meal"

    kit = client.post("/api/checkin", json={"badge_uid": badge_uid, "check_in_type": "kit"})
    assert kit.status_code == 403
    assert kit.get_json()["error"] == "Attendee is not entitled to kits"

    unknown = client.post("/api/checkin", json={"badge_uid": "REGNOSUCHBADGE", "check_in_type": "general"})
    assert unknown.status_code == 404

    bad_type = client.post("/api/checkin", json={"badge_uid": badge_uid, "check_in_type": "dinner"})
    assert bad_type.status_code == 400

    no_badge = client.post("/api/checkin", json={"check_in_type": "general"})
    assert no_badge.status_code == 400
    assert no_badge.get_json()["error"] == "Badge UID is required"

    lookup = client.get("/api/checkin", query_string={"badge_uid": badge_uid}).get_json()["data"]
    assert [ci["check_in_type"] for ci in lookup["check_ins"]] == ["meal"]
    assert lookup["events"]["event_code"] == "CONF2025"


def test_scan_check_in(client, badge_uid):
    payload = qr_codec.encode(badge_uid, "CONF2025")

    resp = client.post("/api/checkin/scan", json={"payload": payload})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["check_in_type"] == "general"

    garbage = client.post("/api/checkin/scan", json={"payload": "{{{"})
    assert garbage.status_code == 400
    assert garbage.get_json() == {"success": False, "error": "Invalid code, please rescan", "code": "QR_INVALID"}


def test_scan_image_check_in(client, badge_uid):
    pytest.importorskip("pyzbar.pyzbar")
    from src.checkin_system.checkin_system.badges.qr_image import render_png

    image = render_png(qr_codec.encode(badge_uid), size_px=400)
    resp = client.post(
        "/api/checkin/scan/image",
        data={"image": (image, "badge.png"), "check_in_type": "meal"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["check_in_type"] == "meal"


def test_scan_image_requires_file(client):
    resp = client.post("/api/checkin/scan/image", data={"check_in_type": "meal"}, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Image file is required"


def test_qr_decode_endpoint(client):
    good = client.post("/api/qr/decode", json={"payload": qr_codec.encode("REGABC123", "CONF2025")}).get_json()
    assert good["valid"] is True
    assert good["data"]["badge_uid"] == "REGABC123"

    bad = client.post("/api/qr/decode", json={"payload": "not a badge"}).get_json()
    assert bad == {"success": True, "valid": False, "data": None}


def test_badge_qr_formats(client, badge_uid):
    as_json = client.get(f"/api/badges/{badge_uid}/qr", query_string={"format": "json"}).get_json()
    decoded = qr_codec.decode(as_json["payload"])
    assert decoded.badge_uid == badge_uid
    assert decoded.event_code == "CONF2025"

    png = client.get(f"/api/badges/{badge_uid}/qr")
    assert png.status_code == 200
    assert png.mimetype == "image/png"
    assert png.data.startswith(b"\x89PNG")

    svg = client.get(f"/api/badges/{badge_uid}/qr", query_string={"format": "svg"})
    assert svg.mimetype == "image/svg+xml"
    assert b"<svg" in svg.data

    assert client.get(f"/api/badges/{badge_uid}/qr", query_string={"size": "9"}).status_code == 400
    assert client.get(f"/api/badges/{badge_uid}/qr", query_string={"format": "gif"}).status_code == 400
    assert client.get("/api/badges/REGMISSING01/qr").status_code == 404


def test_badge_zpl(client, badge_uid):
    resp = client.get(f"/api/badges/{badge_uid}/zpl")

    assert resp.status_code == 200
    text = resp.get_data(as_text=True)
    assert text.startswith("^XA")
    assert f"^FDLA,{badge_uid}^FS" in text


def test_search_endpoint(client, badge_uid):
    found = client.get("/api/attendees", query_string={"query": "smith"}).get_json()["data"]
    assert [a["badge_uid"] for a in found] == [badge_uid]

    assert client.get("/api/attendees").status_code == 400


def test_admin_attendees_crud(client, badge_uid):
    listing = client.get("/api/admin/attendees", query_string={"limit": 10}).get_json()
    assert listing["pagination"] == {"total": 1, "limit": 10, "offset": 0, "hasMore": False}
    attendee_id = listing["data"][0]["id"]

    updated = client.put("/api/admin/attendees", query_string={"id": attendee_id}, json={"kit_entitled": True})
    assert updated.status_code == 200
    assert updated.get_json()["data"]["kit_entitled"] is True

    assert client.put("/api/admin/attendees", json={"kit_entitled": True}).status_code == 400
    assert client.delete("/api/admin/attendees").status_code == 400

    deleted = client.delete("/api/admin/attendees", query_string={"id": attendee_id})
    assert deleted.get_json() == {"success": True, "message": "Attendee deleted successfully"}
    assert client.delete("/api/admin/attendees", query_string={"id": attendee_id}).status_code == 404


def test_admin_analytics_and_exports(client, badge_uid):
    client.post("/api/checkin", json={"badge_uid": badge_uid, "check_in_type": "meal"})

    analytics = client.get("/api/admin/analytics", query_string={"period": "30d"}).get_json()["data"]
    assert analytics["overview"]["totalCheckIns"] == 1
    assert analytics["overview"]["period"] == "30d"

    attendees_csv = client.get("/api/admin/export/attendees")
    assert attendees_csv.mimetype == "text/csv"
    assert attendees_csv.headers["Content-Disposition"] == "attachment; filename=attendees.csv"
    assert attendees_csv.data.startswith(b"\xef\xbb\xbfbadge_uid,full_name")
    assert badge_uid.encode() in attendees_csv.data

    checkins_csv = client.get("/api/admin/export/checkins").get_data(as_text=True)
    assert "meal" in checkins_csv

    assert client.get("/api/admin/export/analytics").headers["Content-Disposition"].endswith("analytics_7d.csv")
    assert client.get("/api/admin/export/nope").status_code == 400


def test_registration_rate_limit(monkeypatch, badge_generator, registration_payload):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.checkin_system.checkin_system.main import create_app

    container = build_container(
        backend="memory",
        memory_store=MemoryStore(),
        badge_generator=badge_generator,
        rate_limiter=FixedWindowRateLimiter(rules={"default": (60, 100), "registration": (900, 2)}),
    )
    event = container.event_service.create_event(event_code="CONF2025", event_name="Conference", event_date="2025-12-01")
    client = create_app(container=container).test_client()
    payload = {**registration_payload, "event_id": event.id}

    for i in range(2):
        assert client.post("/api/register", json={**payload, "email": f"p{i}@example.com"}).status_code == 200

    blocked = client.post("/api/register", json={**payload, "email": "p9@example.com"})
    assert blocked.status_code == 429
    assert blocked.get_json()["error"] == "Too many registration attempts. Please try again later."
    assert int(blocked.headers["Retry-After"]) > 0

    other_client = client.post("/api/register", json={**payload, "email": "p9@example.com"}, headers={"x-user-id": "kiosk-2"})
    assert other_client.status_code == 200


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
