from __future__ import annotations

import re
from datetime import date, datetime, timedelta


_TIME_INPUT_RE = re.compile(r"^(\d{1,2})(?::(\d{1,2})|(\d{2}))?\s*(am|pm|a|p)?$", re.IGNORECASE)


def format_time_to_ampm(time24: str | None) -> str:
    """Render a stored ``HH:MM`` time as ``h:MM AM``; blank stays blank."""
    if not time24:
        return ""
    hours, _, minutes = time24.partition(":")
    try:
        hour = int(hours)
    except ValueError:
        return time24
    hour12 = hour % 12 or 12
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour12}:{minutes} {suffix}"


def convert_time_input(value: str | None) -> str:
    """Turn loose user input (``2:30 pm``, ``230p``, ``14:30``) into ``HH:MM``.

    Input that does not look like a time is returned unchanged.
    """
    if not value:
        return ""

    if ":" in value and len(value) == 5:
        return value

    match = _TIME_INPUT_RE.match(value.strip().lower())
    if not match:
        return value

    hours = int(match.group(1))
    raw_minutes = match.group(2) or match.group(3)
    minutes = int(raw_minutes) if raw_minutes else 0
    meridiem = match.group(4)

    if meridiem:
        if meridiem.startswith("p") and hours != 12:
            hours += 12
        if meridiem.startswith("a") and hours == 12:
            hours = 0

    if hours > 23 or minutes > 59:
        return value

    return f"{hours:02d}:{minutes:02d}"


def parse_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def week_start(reference: date) -> date:
    """Monday of the week containing ``reference``."""
    return reference - timedelta(days=reference.weekday())


def week_bounds(reference: date) -> tuple[date, date]:
    start = week_start(reference)
    return start, start + timedelta(days=6)


def today_iso(now: datetime | None = None) -> str:
    return (now or datetime.now()).date().isoformat()


def current_time_24h(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%H:%M")


def epoch_millis(now: datetime | None = None) -> int:
    return int((now or datetime.now()).timestamp() * 1000)
