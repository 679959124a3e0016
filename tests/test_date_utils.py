"""
Unit tests for the temporal predicates used by IS_WEEKEND and DATE_RANGE.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from services.date_utils import (
    get_current_date_iso,
    get_day_name,
    is_date_in_range,
    is_weekend,
)


class TestIsWeekend:

    @pytest.mark.parametrize("value", [
        "2025-11-01",
        "2025-11-02",
        "2025-11-01T23:30:00Z",
        "2025-11-02T00:30:00+02:00",  # still Saturday in UTC
    ])
    def test_weekend_strings(self, value):
        assert is_weekend(value) is True

    @pytest.mark.parametrize("value", ["2025-11-03", "2025-11-07T12:00:00Z"])
    def test_weekday_strings(self, value):
        assert is_weekend(value) is False

    def test_date_and_datetime_objects(self):
        assert is_weekend(date(2025, 11, 1)) is True
        assert is_weekend(datetime(2025, 11, 3, 9, 0)) is False
        # Sunday 01:00 in New York is Sunday 06:00 UTC
        ny = timezone(timedelta(hours=-5))
        assert is_weekend(datetime(2025, 11, 2, 1, 0, tzinfo=ny)) is True

    @pytest.mark.parametrize("value", ["not a date", "", None, 12345, ["2025-11-01"]])
    def test_unparseable_is_never_weekend(self, value):
        assert is_weekend(value) is False


class TestIsDateInRange:

    def test_bounds_are_inclusive(self):
        assert is_date_in_range("2025-12-15", "2025-12-15", "2025-12-31") is True
        assert is_date_in_range("2025-12-31", "2025-12-15", "2025-12-31") is True
        assert is_date_in_range("2025-12-20", "2025-12-15", "2025-12-31") is True

    def test_outside_range(self):
        assert is_date_in_range("2025-12-14", "2025-12-15", "2025-12-31") is False
        assert is_date_in_range("2026-01-01", "2025-12-15", "2025-12-31") is False
        # later on the end day is past a date-only end bound
        assert is_date_in_range("2025-12-31T10:00:00Z", "2025-12-15", "2025-12-31") is False

    def test_unparseable_sides(self):
        assert is_date_in_range("garbage", "2025-12-15", "2025-12-31") is False
        assert is_date_in_range("2025-12-20", "garbage", "2025-12-31") is False
        assert is_date_in_range("2025-12-20", "2025-12-15", None) is False


class TestDayName:

    def test_names(self):
        assert get_day_name("2025-11-03") == "Monday"
        assert get_day_name("2025-11-01") == "Saturday"
        assert get_day_name(date(2025, 11, 2)) == "Sunday"

    def test_unparseable(self):
        assert get_day_name("tomorrow") is None

    def test_current_date_iso(self):
        today = get_current_date_iso()
        assert len(today) == 10
        assert date.fromisoformat(today)
