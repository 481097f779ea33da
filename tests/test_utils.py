"""Tests for utils.py - week calculation utilities."""

from datetime import date, datetime, timedelta, timezone

import pytest

from utils import (
    add_weeks,
    format_mmddyy,
    get_week_end,
    get_week_start,
    get_weeks_in_year,
    iso_week_number,
    sub_weeks,
    week_range_label,
)


class TestIsoWeekNumber:
    """Tests for iso_week_number function."""

    def test_matches_isocalendar(self):
        """Every day of 2020-2027 agrees with the standard library."""
        day = date(2020, 1, 1)
        while day < date(2028, 1, 1):
            assert iso_week_number(day) == day.isocalendar()[1], day
            day += timedelta(days=1)

    def test_year_end_belongs_to_next_years_week_one(self):
        assert iso_week_number(date(2025, 12, 29)) == 1

    def test_january_can_be_week_53(self):
        assert iso_week_number(date(2021, 1, 1)) == 53

    def test_aware_datetime_uses_utc(self):
        """Sunday evening in the Pacific is already Monday in UTC."""
        sunday_evening = datetime(2025, 6, 1, 20, tzinfo=timezone(timedelta(hours=-8)))
        assert iso_week_number(sunday_evening) == 23


class TestGetWeekStart:
    """Tests for get_week_start function."""

    def test_monday_returns_same_day(self):
        mon = date(2025, 6, 2)
        assert mon.weekday() == 0
        assert get_week_start(mon) == datetime(2025, 6, 2, tzinfo=timezone.utc)

    def test_sunday_returns_previous_monday(self):
        """Sunday is the last day of the week, not the first."""
        sun = date(2025, 6, 8)
        assert sun.weekday() == 6
        assert get_week_start(sun) == datetime(2025, 6, 2, tzinfo=timezone.utc)

    def test_wednesday_returns_previous_monday(self):
        assert get_week_start(date(2025, 6, 4)) == datetime(2025, 6, 2, tzinfo=timezone.utc)

    def test_datetime_input(self):
        assert get_week_start(datetime(2025, 6, 4, 15, 30, tzinfo=timezone.utc)) == datetime(
            2025, 6, 2, tzinfo=timezone.utc
        )


class TestGetWeekEnd:
    """Tests for get_week_end function."""

    def test_last_instant_of_sunday(self):
        assert get_week_end(date(2025, 6, 4)) == datetime(2025, 6, 8, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_sunday_is_its_own_week_end(self):
        assert get_week_end(date(2025, 6, 8)).date() == date(2025, 6, 8)


class TestWeekArithmetic:
    """Tests for add_weeks, sub_weeks and labels."""

    def test_add_and_sub(self):
        start = get_week_start(date(2025, 6, 2))
        assert add_weeks(start, 2) == datetime(2025, 6, 16, tzinfo=timezone.utc)
        assert sub_weeks(start, 1) == datetime(2025, 5, 26, tzinfo=timezone.utc)

    def test_format_mmddyy(self):
        assert format_mmddyy(date(2025, 6, 2)) == "06/02/25"

    def test_week_range_label(self):
        assert week_range_label(date(2025, 6, 4)) == "(23) 06/02/25 to 06/08/25"


class TestGetWeeksInYear:
    """Tests for get_weeks_in_year function."""

    def test_current_year_starts_at_today(self):
        weeks = get_weeks_in_year(2025, today=date(2025, 6, 4))
        assert weeks[0]["label"] == "Week 23 (06/02/25 - 06/08/25)"
        assert weeks[0]["value"] == "06/02/25-06/08/25"
        assert weeks[-1]["start"] == datetime(2025, 1, 6, tzinfo=timezone.utc)
        assert len(weeks) == 22

    def test_newest_first(self):
        weeks = get_weeks_in_year(2025, today=date(2025, 6, 4))
        starts = [w["start"] for w in weeks]
        assert starts == sorted(starts, reverse=True)

    @pytest.mark.parametrize("year", [2023, 2024])
    def test_past_year_covers_whole_year(self, year):
        weeks = get_weeks_in_year(year, today=date(2025, 6, 4))
        assert all(w["start"].year == year for w in weeks)
        assert weeks[0]["start"] == get_week_start(date(year, 12, 31))
        assert len(weeks) in (52, 53)
