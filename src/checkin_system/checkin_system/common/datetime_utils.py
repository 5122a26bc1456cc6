from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time (naive, as stored in the database).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def epoch_millis(moment: datetime | None = None) -> int:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def isoformat(value: datetime | date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def coerce_date(value: object) -> date:
    """Accept a date, a datetime or an ISO-8601 date/datetime string.

    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")
    text = value.strip()
    if len(text) == 10:
        return parse_iso_date(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
