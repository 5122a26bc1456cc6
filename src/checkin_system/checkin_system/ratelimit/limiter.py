from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Protocol, Tuple

from ..core.constants import RATE_LIMITS


@dataclass(frozen=True)
class RateLimitRule:
    window_seconds: int
    max_requests: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        return max(0, int(round(self.reset_at - now)))


class CounterStore(Protocol):
    """Fixed-window counters keyed by an opaque string."""

    def hit(self, key: str, *, window_seconds: int, now: float) -> Tuple[int, float]:
        """Increment the counter for ``key`` and return (count, reset_at)."""

        raise NotImplementedError


class InMemoryCounterStore(CounterStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Dict[str, Tuple[int, float]] = {}

    def hit(self, key: str, *, window_seconds: int, now: float) -> Tuple[int, float]:
        with self._lock:
            self._evict_expired(now)
            count, reset_at = self._counters.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._counters[key] = (count, reset_at)
            return count, reset_at

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._counters.items() if reset_at <= now]
        for key in expired:
            del self._counters[key]


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: Optional[CounterStore] = None,
        *,
        rules: Optional[Mapping[str, Tuple[int, int]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._store = store or InMemoryCounterStore()
        self._rules = {
            name: RateLimitRule(window_seconds=int(window), max_requests=int(limit))
            for name, (window, limit) in (rules or RATE_LIMITS).items()
        }
        self._clock = clock or time.monotonic

    def rule(self, name: str) -> RateLimitRule:
        return self._rules.get(name) or self._rules["default"]

    def now(self) -> float:
        return self._clock()

    def check(self, name: str, client_id: str) -> RateLimitDecision:
        rule = self.rule(name)
        count, reset_at = self._store.hit(f"{name}:{client_id}", window_seconds=rule.window_seconds, now=self.now())
        return RateLimitDecision(
            allowed=count <= rule.max_requests,
            remaining=max(0, rule.max_requests - count),
            reset_at=reset_at,
        )
