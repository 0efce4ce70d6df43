"""Tests for the calendar helpers the windows and directives are built on."""

from datetime import date, datetime

import pytest

from dayboard import dates


# 2026-01-05 is a Monday
MONDAY = date(2026, 1, 5)
WEDNESDAY = date(2026, 1, 7)
SATURDAY = date(2026, 1, 10)
SUNDAY = date(2026, 1, 11)


class TestIsoDates:
    """Formatting and parsing YYYY-MM-DD."""

    def test_to_iso_date_pads(self):
        assert dates.to_iso_date(date(2026, 3, 4)) == "2026-03-04"

    def test_to_iso_date_drops_time(self):
        assert dates.to_iso_date(datetime(2026, 3, 4, 23, 59)) == "2026-03-04"

    def test_from_iso_date(self):
        assert dates.from_iso_date("2026-01-05") == MONDAY

    def test_from_iso_date_ignores_time_part(self):
        """A stored timestamp still maps to its calendar day."""
        assert dates.from_iso_date("2026-01-05T18:30:00") == MONDAY

    def test_string_order_is_date_order(self):
        """Lexicographic order of ISO strings matches chronological order."""
        days = [date(2025, 12, 31), date(2026, 1, 1), date(2026, 1, 10), date(2026, 2, 1)]
        isos = [dates.to_iso_date(d) for d in days]
        assert sorted(isos) == isos


class TestWeekHelpers:
    """Week start, weekday numbering and Saturday lookups."""

    def test_js_weekday_numbering(self):
        assert dates.js_weekday(SUNDAY) == 0
        assert dates.js_weekday(MONDAY) == 1
        assert dates.js_weekday(SATURDAY) == 6

    @pytest.mark.parametrize("day", [MONDAY, WEDNESDAY, SATURDAY, SUNDAY])
    def test_start_of_week_monday(self, day):
        """Every day of the week maps back to Monday Jan 5."""
        assert dates.start_of_week_monday(day) == MONDAY

    def test_add_days_negative(self):
        assert dates.add_days(MONDAY, -1) == date(2026, 1, 4)

    def test_add_days_crosses_month(self):
        assert dates.add_days(date(2026, 1, 30), 3) == date(2026, 2, 2)

    def test_upcoming_saturday_from_weekday(self):
        assert dates.upcoming_saturday(WEDNESDAY) == SATURDAY

    def test_upcoming_saturday_on_saturday_is_same_day(self):
        assert dates.upcoming_saturday(SATURDAY) == SATURDAY

    def test_upcoming_saturday_from_sunday(self):
        assert dates.upcoming_saturday(SUNDAY) == date(2026, 1, 17)


class TestNextWeekday:
    """next_weekday_on_or_after never returns the starting day."""

    def test_later_this_week(self):
        assert dates.next_weekday_on_or_after(WEDNESDAY, 5) == date(2026, 1, 9)

    def test_same_weekday_means_next_week(self):
        """#monday typed on a Monday is the following Monday."""
        assert dates.next_weekday_on_or_after(MONDAY, 1) == date(2026, 1, 12)

    def test_earlier_weekday_wraps(self):
        assert dates.next_weekday_on_or_after(WEDNESDAY, 1) == date(2026, 1, 12)

    def test_sunday_after_saturday(self):
        assert dates.next_weekday_on_or_after(SATURDAY, 0) == SUNDAY


class TestLabels:
    """Card labels."""

    def test_visible_days(self):
        days = dates.visible_days(WEDNESDAY)
        assert len(days) == 7
        assert days[0] == WEDNESDAY
        assert days[-1] == date(2026, 1, 13)

    def test_day_labels(self):
        assert dates.day_label(WEDNESDAY, 0) == "Today"
        assert dates.day_label(date(2026, 1, 8), 1) == "Tomorrow"
        assert dates.day_label(date(2026, 1, 9), 2) == "Friday"
