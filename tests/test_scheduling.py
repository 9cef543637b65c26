"""Tests for the calendar helpers."""

import pytest
from datetime import date, datetime

from lifeplanner.models.finance import RecurrenceFrequency
from lifeplanner.services.scheduling import (
    add_months,
    advance_date,
    days_since,
    start_of_week,
)


class TestAddMonths:

    def test_plain(self):
        assert add_months(date(2024, 1, 15), 1) == date(2024, 2, 15)

    def test_year_rollover(self):
        assert add_months(date(2024, 12, 10), 1) == date(2025, 1, 10)
        assert add_months(date(2024, 1, 10), -1) == date(2023, 12, 10)

    def test_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_anchor_day_is_restored(self):
        assert add_months(date(2024, 2, 29), 1, anchor_day=31) == date(2024, 3, 31)
        assert add_months(date(2024, 3, 31), 1, anchor_day=31) == date(2024, 4, 30)


class TestAdvanceDate:

    @pytest.mark.parametrize("frequency,expected", [
        (RecurrenceFrequency.DAILY, date(2024, 3, 1)),
        (RecurrenceFrequency.WEEKLY, date(2024, 3, 7)),
        (RecurrenceFrequency.MONTHLY, date(2024, 3, 29)),
        (RecurrenceFrequency.YEARLY, date(2025, 2, 28)),
    ])
    def test_frequencies(self, frequency, expected):
        assert advance_date(date(2024, 2, 29), frequency) == expected


class TestDayHelpers:

    def test_days_since_floors(self):
        now = datetime(2024, 4, 8, 9, 0)
        assert days_since(datetime(2024, 4, 1, 9, 0), now) == 7
        assert days_since(datetime(2024, 4, 1, 9, 1), now) == 6

    def test_start_of_week(self):
        assert start_of_week(datetime(2024, 4, 3, 15, 45)) == datetime(2024, 3, 31)
        assert start_of_week(datetime(2024, 3, 31, 8, 0)) == datetime(2024, 3, 31)
