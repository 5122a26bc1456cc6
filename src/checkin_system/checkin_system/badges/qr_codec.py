"""Badge QR payload codec.

The payload is a JSON object::

    {"type": "badge", "badge_uid": "...", "event_code": "...", "timestamp": 1733040000000, "version": "1.0"}

``event_code`` is omitted when not supplied. Scanned text is untrusted, so
``decode`` never raises: anything that is not a badge payload comes back as
``None``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

from ..common.datetime_utils import epoch_millis
from ..core.constants import QR_PAYLOAD_TYPE, QR_PAYLOAD_VERSION
from ..core.exceptions import QRDecodeInvalid

logger = logging.getLogger(__name__)

_KNOWN_KEYS = ("type", "badge_uid", "event_code", "timestamp", "version")


@dataclass(frozen=True)
class BadgePayload:
    badge_uid: str
    type: str = QR_PAYLOAD_TYPE
    event_code: Optional[str] = None
    timestamp: Optional[Union[int, float]] = None
    version: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {"type": self.type, "badge_uid": self.badge_uid}
        if self.event_code is not None:
            out["event_code"] = self.event_code
        if self.timestamp is not None:
            out["timestamp"] = self.timestamp
        if self.version is not None:
            out["version"] = self.version
        out.update(self.extra)
        return out


def encode(badge_uid: str, event_code: Optional[str] = None, *, now: Optional[datetime] = None) -> str:
    payload: Dict[str, Any] = {"type": QR_PAYLOAD_TYPE, "badge_uid": badge_uid}
    if event_code is not None:
        payload["event_code"] = event_code
    payload["timestamp"] = epoch_millis(now)
    payload["version"] = QR_PAYLOAD_VERSION
    return json.dumps(payload, separators=(",", ":"))


def decode(payload: object) -> Optional[BadgePayload]:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(payload, str):
        return None

    try:
        data = json.loads(payload)
    except (ValueError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None
    if data.get("type") != QR_PAYLOAD_TYPE:
        return None

    badge_uid = data.get("badge_uid")
    if not isinstance(badge_uid, str) or not badge_uid:
        return None

    typed = {
        "event_code": data.get("event_code") if isinstance(data.get("event_code"), str) else None,
        "timestamp": data.get("timestamp") if _is_number(data.get("timestamp")) else None,
        "version": data.get("version") if isinstance(data.get("version"), str) else None,
    }
    # Optional fields with an unexpected type are kept in extra.
    extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS or (k in typed and typed[k] is None)}
    return BadgePayload(badge_uid=badge_uid, type=QR_PAYLOAD_TYPE, extra=extra, **typed)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid(payload: object) -> bool:
    return decode(payload) is not None


def decode_or_raise(payload: object) -> BadgePayload:
    decoded = decode(payload)
    if decoded is None:
        logger.info("Rejected scanned payload (%d chars)", len(payload) if isinstance(payload, (str, bytes)) else 0)
        raise QRDecodeInvalid()
    return decoded
