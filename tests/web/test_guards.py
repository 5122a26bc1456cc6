from __future__ import annotations

import pytest

from src.checkin_system.checkin_system.core.exceptions import RequestRejected
from src.checkin_system.checkin_system.web.guards import check_request

ALLOWED = ("https://checkin.example.org", "http://localhost:3000")


def _check(headers, *, method="GET", require_csrf=False):
    check_request(method=method, headers=headers, allowed_origins=ALLOWED, require_csrf=require_csrf)


@pytest.mark.parametrize(
    "headers",
    [
        {"origin": "https://checkin.example.org"},
        {"origin": "HTTPS://Checkin.Example.org"},
        {"origin": "http://localhost:3000"},
        {"referer": "https://checkin.example.org/admin?tab=1"},
        {},
    ],
)
def test_allowed_origins(headers):
    _check(headers)


@pytest.mark.parametrize(
    "headers",
    [
        {"origin": "https://evil.test"},
        {"referer": "https://evil.test/?https://checkin.example.org"},
        {"origin": "https://checkin.example.org.evil.test"},
        {"origin": "http://checkin.example.org"},
        {"origin": "http://localhost:4000"},
        {"origin": "null"},
    ],
)
def test_rejected_origins(headers):
    with pytest.raises(RequestRejected) as exc:
        _check(headers)
    assert exc.value.status_code == 403


def test_post_needs_json_and_csrf_when_required():
    with pytest.raises(RequestRejected) as exc:
        _check({"content-type": "text/plain"}, method="POST")
    assert exc.value.status_code == 400

    with pytest.raises(RequestRejected) as exc:
        _check({"content-type": "application/json"}, method="POST", require_csrf=True)
    assert exc.value.status_code == 403

    _check({"content-type": "application/json; charset=utf-8", "x-csrf-token": "t"}, method="POST", require_csrf=True)
