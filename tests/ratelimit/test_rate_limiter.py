from __future__ import annotations

import pytest

from src.checkin_system.checkin_system.ratelimit.limiter import FixedWindowRateLimiter, InMemoryCounterStore
from src.checkin_system.checkin_system.web.guards import client_identifier


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(rules={"default": (60, 3), "registration": (900, 1)}, clock=clock)


def test_allows_up_to_limit_then_blocks(limiter):
    decisions = [limiter.check("default", "10.0.0.1") for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]


def test_window_resets(limiter, clock):
    for _ in range(3):
        limiter.check("default", "10.0.0.1")
    clock.value += 30
    blocked = limiter.check("default", "10.0.0.1")
    assert not blocked.allowed
    assert blocked.retry_after(clock.value) == 30

    clock.value += 30
    assert limiter.check("default", "10.0.0.1").allowed


def test_limits_are_per_client_and_per_name(limiter):
    assert limiter.check("registration", "a").allowed
    assert not limiter.check("registration", "a").allowed
    assert limiter.check("registration", "b").allowed
    assert limiter.check("default", "a").allowed


def test_unknown_name_uses_default_rule(limiter):
    assert limiter.rule("search") == limiter.rule("default")


def test_expired_counters_are_evicted():
    store = InMemoryCounterStore()
    store.hit("a", window_seconds=10, now=0)
    store.hit("b", window_seconds=10, now=20)

    assert list(store._counters) == ["b"]


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-user-id": "desk-7", "x-forwarded-for": "1.1.1.1"}, "desk-7"),
        ({"x-forwarded-for": "1.1.1.1, 10.0.0.1"}, "1.1.1.1"),
        ({"x-real-ip": "2.2.2.2"}, "2.2.2.2"),
        ({"cf-connecting-ip": "3.3.3.3"}, "3.3.3.3"),
        ({}, "unknown"),
    ],
)
def test_client_identifier(headers, expected):
    assert client_identifier(headers) == expected
