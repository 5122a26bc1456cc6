from __future__ import annotations

import random
import re

import pytest

from src.checkin_system.checkin_system.badges.generator import BadgeUIDGenerator, to_base36
from src.checkin_system.checkin_system.common.validators import is_valid_badge_uid


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert to_base36(36**7 + 35) == "1000000z"

    with pytest.raises(ValueError):
        to_base36(-1)


def test_generate_has_prefix_timestamp_and_random_suffix():
    gen = BadgeUIDGenerator(clock_ms=lambda: 36**7, rng=random.Random(7))

    uid = gen.generate()

    assert uid.startswith("REG10000000")
    assert len(uid) == len("REG10000000") + 6
    assert re.fullmatch(r"REG[0-9A-Z]+", uid)
    assert is_valid_badge_uid(uid)


def test_generate_is_uppercase_and_varies_with_randomness():
    gen = BadgeUIDGenerator(clock_ms=lambda: 36**7, rng=random.Random(1))

    uids = {gen.generate() for _ in range(50)}

    assert len(uids) > 1
    assert all(u == u.upper() for u in uids)


def test_generator_is_callable():
    gen = BadgeUIDGenerator(clock_ms=lambda: 1, rng=random.Random(3))

    assert gen().startswith("REG1")
