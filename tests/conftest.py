from __future__ import annotations

import random
from datetime import date, datetime
from itertools import count

import pytest

from src.checkin_system.checkin_system.badges.generator import BadgeUIDGenerator
from src.checkin_system.checkin_system.container import build_container
from src.checkin_system.checkin_system.database.memory_store import MemoryStore


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 12, 1, 9, 30, 0)


@pytest.fixture
def badge_generator() -> BadgeUIDGenerator:
    # Deterministic but distinct tokens: the clock advances 1ms per call.
    ticks = count(1764581400000)
    return BadgeUIDGenerator(clock_ms=lambda: next(ticks), rng=random.Random(42))


@pytest.fixture
def container(badge_generator):
    return build_container(backend="memory", memory_store=MemoryStore(), badge_generator=badge_generator)


@pytest.fixture
def event(container, fixed_now):
    return container.event_service.create_event(
        event_code="CONF2025",
        event_name="Medical Conference 2025",
        event_date=date(2025, 12, 1),
        now=fixed_now,
    )


@pytest.fixture
def registration_payload(event) -> dict:
    return {
        "event_id": event.id,
        "full_name": "Dr. John Smith",
        "email": "john.smith@example.com",
        "phone": "+1 (555) 010-0199",
        "institution": "City Hospital",
        "category": "delegate",
        "meal_entitled": True,
        "kit_entitled": False,
    }


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.checkin_system.checkin_system.main import create_app

    flask_app = create_app(container=container)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
