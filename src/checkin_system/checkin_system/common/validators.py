from __future__ import annotations

import re
from typing import Optional

from ..core.constants import BADGE_UID_PATTERN, MAX_INPUT_LENGTH
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-()]")
_BADGE_RE = re.compile(BADGE_UID_PATTERN)


def sanitize_input(value: object) -> str:
    """Trim, strip angle brackets and cap the length of free-text input."""
    if not isinstance(value, str):
        return ""
    return value.strip().replace("<", "").replace(">", "")[:MAX_INPUT_LENGTH]


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", {field_name: "required"})
    return value.strip()


def require_length(value: str, field_name: str, *, min_len: int = 0, max_len: Optional[int] = None) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(
            f"{field_name} must be at least {min_len} characters",
            {field_name: f"min_length:{min_len}"},
        )
    if max_len is not None and len(value) > max_len:
        raise ValidationError(
            f"{field_name} must be at most {max_len} characters",
            {field_name: f"max_length:{max_len}"},
        )
    return value


def is_valid_email(email: str) -> bool:
    return bool(email) and len(email) <= 254 and _EMAIL_RE.match(email) is not None


def is_valid_phone(phone: str) -> bool:
    if not phone:
        return False
    return _PHONE_RE.match(_PHONE_SEPARATORS_RE.sub("", phone)) is not None


def is_valid_badge_uid(badge_uid: object) -> bool:
    return isinstance(badge_uid, str) and _BADGE_RE.match(badge_uid) is not None


def require_email(email: str, field_name: str = "email") -> str:
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", {field_name: "invalid_email"})
    return email


def require_phone(phone: str, field_name: str = "phone") -> str:
    if not is_valid_phone(phone):
        raise ValidationError("Invalid phone number format", {field_name: "invalid_phone"})
    return phone


def require_bool(value: object, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false", {field_name: "invalid_bool"})
    return value
