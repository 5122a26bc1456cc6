from __future__ import annotations

import random
import string
import time
from typing import Callable, Optional

from ..core.constants import BADGE_PREFIX, BADGE_RANDOM_LENGTH

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class BadgeUIDGenerator:
    """Produces ``REG`` + base36(epoch ms) + 6 random base36 chars, uppercased.

    Tokens are not guaranteed unique on their own; the attendees table carries
    a unique key on badge_uid and registration retries on conflict.
    """

    def __init__(
        self,
        *,
        clock_ms: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
        random_length: int = BADGE_RANDOM_LENGTH,
    ):
        self._clock_ms = clock_ms or _wall_clock_ms
        self._rng = rng or random.SystemRandom()
        self._random_length = int(random_length)

    def generate(self) -> str:
        stamp = to_base36(int(self._clock_ms()))
        suffix = "".join(self._rng.choice(BASE36_ALPHABET) for _ in range(self._random_length))
        return f"{BADGE_PREFIX}{stamp}{suffix}".upper()

    __call__ = generate
