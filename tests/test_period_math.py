from datetime import date

import pytest

from models.billing import Frequency
from utils.period_math import (
    add_anniversary_year,
    add_period,
    days_between_inclusive,
    months_for_frequency,
    period_length_days,
    same_month,
    snap_to_first_day,
    snap_to_last_day,
)


class TestMonthsForFrequency:
    @pytest.mark.parametrize("frequency, months", [
        ("monthly", 1),
        ("quarterly", 3),
        ("four_monthly", 4),
        ("biannual", 6),
        ("annual", 12),
    ])
    def test_months(self, frequency, months):
        assert months_for_frequency(frequency) == months

    def test_accepts_enum(self):
        assert months_for_frequency(Frequency.QUARTERLY) == 3

    def test_unsupported_frequency_fails_fast(self):
        with pytest.raises(ValueError, match="Unsupported frequency"):
            months_for_frequency("weekly")


class TestAddPeriod:
    def test_monthly(self):
        assert add_period(date(2025, 1, 15), "monthly") == date(2025, 2, 15)

    def test_month_end_overflow_clamps(self):
        assert add_period(date(2025, 1, 31), "monthly") == date(2025, 2, 28)
        assert add_period(date(2024, 1, 31), "monthly") == date(2024, 2, 29)

    def test_quarterly_crosses_year(self):
        assert add_period(date(2025, 11, 10), "quarterly") == date(2026, 2, 10)

    def test_four_monthly(self):
        assert add_period(date(2025, 1, 10), Frequency.FOUR_MONTHLY) == date(2025, 5, 10)

    def test_biannual(self):
        assert add_period(date(2025, 3, 31), "biannual") == date(2025, 9, 30)

    def test_annual_from_leap_day(self):
        assert add_period(date(2024, 2, 29), "annual") == date(2025, 2, 28)

    def test_unsupported_frequency(self):
        with pytest.raises(ValueError):
            add_period(date(2025, 1, 1), "fortnightly")


class TestAddAnniversaryYear:
    def test_regular_day(self):
        assert add_anniversary_year(date(2025, 3, 15)) == date(2026, 3, 15)

    def test_leap_day_rolls_to_march(self):
        assert add_anniversary_year(date(2024, 2, 29)) == date(2025, 3, 1)

    def test_feb_28_is_kept(self):
        assert add_anniversary_year(date(2023, 2, 28)) == date(2024, 2, 28)


class TestSnapping:
    def test_first_day(self):
        assert snap_to_first_day(date(2025, 4, 15)) == date(2025, 4, 1)

    @pytest.mark.parametrize("day, expected", [
        (date(2024, 2, 10), date(2024, 2, 29)),
        (date(2025, 2, 10), date(2025, 2, 28)),
        (date(2025, 4, 1), date(2025, 4, 30)),
        (date(2025, 12, 5), date(2025, 12, 31)),
    ])
    def test_last_day(self, day, expected):
        assert snap_to_last_day(day) == expected


class TestDaysBetweenInclusive:
    def test_counts_both_ends(self):
        assert days_between_inclusive(date(2025, 1, 5), date(2025, 1, 31)) == 27

    def test_same_day(self):
        assert days_between_inclusive(date(2025, 1, 5), date(2025, 1, 5)) == 1

    def test_across_months(self):
        assert days_between_inclusive(date(2025, 1, 30), date(2025, 3, 1)) == 31

    def test_reversed_range_is_not_positive(self):
        assert days_between_inclusive(date(2025, 1, 6), date(2025, 1, 5)) == 0


class TestPeriodLengthDays:
    def test_monthly_uses_start_month(self):
        assert period_length_days(date(2025, 3, 15), "monthly") == 31
        assert period_length_days(date(2024, 2, 20), "monthly") == 29

    def test_quarterly(self):
        # Jan 1 .. Mar 31
        assert period_length_days(date(2025, 1, 20), "quarterly") == 90

    def test_annual(self):
        assert period_length_days(date(2025, 3, 15), "annual") == 365
        # Mar 1 2023 .. Feb 29 2024
        assert period_length_days(date(2023, 3, 15), "annual") == 366


def test_same_month():
    assert same_month(date(2025, 1, 1), date(2025, 1, 31))
    assert not same_month(date(2025, 1, 1), date(2026, 1, 1))
