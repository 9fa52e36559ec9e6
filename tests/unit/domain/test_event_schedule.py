"""Unit tests for event-instant parsing of scheduled plans."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from dinepick.domain.services.event_schedule import (
    compute_event_instant,
    parse_clock_time,
    parse_plan_date,
    uses_midnight_fallback,
)


class TestParseClockTime:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("7:00 PM", (19, 0)),
            ("7:30pm", (19, 30)),
            ("12:00 PM", (12, 0)),
            ("12:15 AM", (0, 15)),
            ("1:05 am", (1, 5)),
            ("  9:45 AM  ", (9, 45)),
        ],
    )
    def test_parses_twelve_hour_times(self, value: str, expected: tuple[int, int]) -> None:
        assert parse_clock_time(value) == expected

    @pytest.mark.parametrize("value", [None, "", "19:00", "7 PM", "13:00 PM", "7:60 PM", "0:30 AM", "dinner"])
    def test_rejects_malformed_times(self, value: str | None) -> None:
        assert parse_clock_time(value) is None


class TestParsePlanDate:
    def test_parses_iso_date(self) -> None:
        assert parse_plan_date("2026-05-03").isoformat() == "2026-05-03"

    @pytest.mark.parametrize("value", [None, "", "05/03/2026", "2026-13-01"])
    def test_rejects_unusable_dates(self, value: str | None) -> None:
        assert parse_plan_date(value) is None


class TestComputeEventInstant:
    def test_combines_date_and_time_in_utc(self) -> None:
        instant = compute_event_instant("2026-05-03", "7:00 PM", timezone.utc)

        assert instant == datetime(2026, 5, 3, 19, 0, tzinfo=timezone.utc)

    def test_uses_plan_timezone(self) -> None:
        instant = compute_event_instant("2026-05-03", "7:00 PM", ZoneInfo("America/New_York"))

        # EDT is UTC-4 in May
        assert instant == datetime(2026, 5, 3, 23, 0, tzinfo=timezone.utc)

    def test_unparseable_time_falls_back_to_midnight(self) -> None:
        instant = compute_event_instant("2026-05-03", "dinnertime", timezone.utc)

        assert instant == datetime(2026, 5, 3, 0, 0, tzinfo=timezone.utc)
        assert uses_midnight_fallback("2026-05-03", "dinnertime") is True

    def test_missing_time_falls_back_to_midnight(self) -> None:
        assert compute_event_instant("2026-05-03", None, timezone.utc) == datetime(
            2026, 5, 3, tzinfo=timezone.utc
        )

    def test_no_usable_date_means_no_instant(self) -> None:
        assert compute_event_instant(None, "7:00 PM", timezone.utc) is None
        assert compute_event_instant("someday", "7:00 PM", timezone.utc) is None
        assert uses_midnight_fallback(None, None) is False

    def test_parsed_time_is_not_a_fallback(self) -> None:
        assert uses_midnight_fallback("2026-05-03", "7:00 PM") is False
