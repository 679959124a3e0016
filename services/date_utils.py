# services/date_utils.py

from datetime import date, datetime, timezone
from typing import Any, Optional

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _parse_date(value: Any) -> Optional[datetime]:
    """
    Interpret value as a UTC datetime.

    Accepts datetime, date and ISO 8601 strings ("2025-11-01",
    "2025-11-01T10:00:00Z", ...). Naive datetimes are taken as UTC.
    Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _parse_date(parsed)


def is_weekend(value: Any) -> bool:
    """Saturday or Sunday in UTC. Unparseable input is never a weekend."""
    parsed = _parse_date(value)
    if parsed is None:
        return False
    return parsed.weekday() >= 5


def is_date_in_range(value: Any, start: Any, end: Any) -> bool:
    """Inclusive start <= value <= end; False if any side fails to parse."""
    parsed = _parse_date(value)
    start_at = _parse_date(start)
    end_at = _parse_date(end)
    if parsed is None or start_at is None or end_at is None:
        return False
    return start_at <= parsed <= end_at


def get_day_name(value: Any) -> Optional[str]:
    parsed = _parse_date(value)
    if parsed is None:
        return None
    return DAY_NAMES[parsed.weekday()]


def get_current_date_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()
