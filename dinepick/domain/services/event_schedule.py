"""Event instant computation for scheduled plans.

A scheduled plan stores its date ("YYYY-MM-DD") and time ("7:30 PM")
as free-form strings. The event instant combines them in the plan
timezone.

Fallback:
    A time string that does not match the 12-hour "h:mm AM/PM" pattern is
    dropped and the event instant becomes midnight of the date. This can
    make a dinner look "past" many hours early, so callers log whenever
    the fallback is used (see ``uses_midnight_fallback``).
"""

from __future__ import annotations

import re
from datetime import date, datetime, tzinfo

_CLOCK_TIME_PATTERN = re.compile(r"^(\d+):(\d+)\s*(AM|PM)$", re.IGNORECASE)


def parse_clock_time(value: str | None) -> tuple[int, int] | None:
    """Parse a 12-hour clock string into (hour, minute) on a 24-hour clock.

    Args:
        value: Time string such as "7:00 PM" or "12:15am".

    Returns:
        (hour, minute) tuple, or None if the string is absent or malformed.
    """
    if not value:
        return None
    match = _CLOCK_TIME_PATTERN.match(value.strip())
    if match is None:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        return None

    is_pm = match.group(3).upper() == "PM"
    if is_pm and hour != 12:
        hour += 12
    if not is_pm and hour == 12:
        hour = 0
    return hour, minute


def parse_plan_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD date string, returning None when unusable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def uses_midnight_fallback(date_value: str | None, time_value: str | None) -> bool:
    """Check if the event instant would silently drop the time component.

    True when a date is present but the time is missing or malformed.
    """
    return parse_plan_date(date_value) is not None and parse_clock_time(time_value) is None


def compute_event_instant(
    date_value: str | None,
    time_value: str | None,
    tz: tzinfo,
) -> datetime | None:
    """Combine a plan's date and time into a timezone-aware instant.

    Args:
        date_value: Event date ("YYYY-MM-DD").
        time_value: Event time ("h:mm AM/PM"), optional.
        tz: Timezone the plan's wall-clock values are expressed in.

    Returns:
        The event instant, midnight of the date if the time is unusable,
        or None if there is no usable date.
    """
    event_date = parse_plan_date(date_value)
    if event_date is None:
        return None

    clock = parse_clock_time(time_value)
    hour, minute = clock if clock is not None else (0, 0)
    return datetime(
        event_date.year, event_date.month, event_date.day, hour, minute, tzinfo=tz
    )
