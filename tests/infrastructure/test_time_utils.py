"""Tests for clock parsing/formatting and Mumbai time helpers."""
from __future__ import annotations

from datetime import datetime, time, timezone

import pytest
from freezegun import freeze_time

from dabba_mcp.infrastructure.time_utils import (
    MUMBAI_TZ,
    format_clock,
    minutes_of_day,
    now_mumbai,
    parse_clock,
    parse_iso_datetime,
)

# ---------------------------------------------------------------------------
# parse_clock / format_clock
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("10:30 AM", time(10, 30)),
        ("1:00 pm", time(13, 0)),
        ("12:00 AM", time(0, 0)),
        ("12:15 PM", time(12, 15)),
        ("14:05", time(14, 5)),
    ],
)
def test_parse_clock(text: str, expected: time) -> None:
    assert parse_clock(text) == expected


@pytest.mark.parametrize("text", ["", "noon", "13:00 PM", "10:75", "25:00"])
def test_parse_clock_invalid_raises(text: str) -> None:
    with pytest.raises(ValueError):
        parse_clock(text)


def test_format_clock_no_leading_zero() -> None:
    assert format_clock(9 * 60) == "9:00 AM"
    assert format_clock(12 * 60 + 45) == "12:45 PM"
    assert format_clock(0) == "12:00 AM"


def test_format_clock_wraps_midnight() -> None:
    assert format_clock(24 * 60 + 30) == "12:30 AM"
    assert format_clock(-30) == "11:30 PM"


def test_minutes_of_day_ignores_seconds() -> None:
    assert minutes_of_day(time(10, 30, 59)) == 630


# ---------------------------------------------------------------------------
# Mumbai time
# ---------------------------------------------------------------------------

@freeze_time("2026-02-24T04:30:00Z")
def test_now_mumbai_is_ist() -> None:
    now = now_mumbai()
    assert now.tzinfo is not None
    assert (now.hour, now.minute) == (10, 0)


def test_parse_iso_naive_is_mumbai_local() -> None:
    dt = parse_iso_datetime("2026-07-14T10:45:00")
    assert dt.tzinfo == MUMBAI_TZ
    assert (dt.hour, dt.minute) == (10, 45)


def test_parse_iso_aware_is_converted() -> None:
    dt = parse_iso_datetime("2026-07-14T05:00:00+00:00")
    assert dt.hour == 10
    assert dt.minute == 30
    assert dt.utcoffset() == datetime(2026, 1, 1, tzinfo=MUMBAI_TZ).utcoffset()
    assert dt.astimezone(timezone.utc).hour == 5


@pytest.mark.parametrize("text", ["", "   ", "tomorrow"])
def test_parse_iso_invalid_raises(text: str) -> None:
    with pytest.raises(ValueError):
        parse_iso_datetime(text)
