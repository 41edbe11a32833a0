from __future__ import annotations

import re
from datetime import datetime, time
from zoneinfo import ZoneInfo

MUMBAI_TZ: ZoneInfo = ZoneInfo("Asia/Kolkata")

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")


def now_mumbai() -> datetime:
    """Return the current moment as a timezone-aware datetime in Asia/Kolkata."""
    return datetime.now(tz=MUMBAI_TZ)


def parse_clock(s: str) -> time:
    """Parse a wall-clock string such as "10:30 AM", "1:00 pm" or "14:05".

    Raises ValueError on anything else.
    """
    match = _CLOCK_RE.match(s or "")
    if match is None:
        raise ValueError(f"Cannot parse clock time: {s!r}")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = match.group(3)
    if period is not None:
        if not 1 <= hours <= 12:
            raise ValueError(f"Hour out of range for 12-hour clock: {s!r}")
        hours = hours % 12
        if period.upper() == "PM":
            hours += 12
    if hours > 23 or minutes > 59:
        raise ValueError(f"Clock time out of range: {s!r}")
    return time(hours, minutes)


def minutes_of_day(t: time | datetime) -> int:
    """Return minutes since midnight, ignoring seconds."""
    return t.hour * 60 + t.minute


def format_clock(minutes: int) -> str:
    """Format minutes since midnight as a 12-hour clock string, e.g. "9:00 AM".

    Values outside one day wrap around midnight.
    """
    minutes %= MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {period}"


def parse_iso_datetime(s: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive input is treated as Mumbai local time.

    Always returns a timezone-aware datetime in Asia/Kolkata.
    Raises ValueError on empty or unparseable input.
    """
    if not s or not s.strip():
        raise ValueError("Empty datetime string")
    try:
        dt = datetime.fromisoformat(s.strip())
    except ValueError:
        raise ValueError(f"Cannot parse datetime string: {s!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=MUMBAI_TZ)
    return dt.astimezone(MUMBAI_TZ)
