"""
utils/period_math.py
--------------------
Calendar arithmetic for billing periods.

All functions work on whole-day ``datetime.date`` values. Month arithmetic
is delegated to ``dateutil.relativedelta``, which clamps overflowing days to
the end of the target month (Jan 31 + 1 month => Feb 28/29). Callers that
need a precise boundary snap the result afterwards.
"""

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from models.billing import Frequency

_MONTHS_PER_FREQUENCY: dict[Frequency, int] = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.FOUR_MONTHLY: 4,
    Frequency.BIANNUAL: 6,
    Frequency.ANNUAL: 12,
}

ONE_DAY = timedelta(days=1)


def months_for_frequency(frequency: Frequency | str) -> int:
    """
    Length of one billing period in whole months.

    Raises:
        ValueError: If the frequency is not supported.
    """
    return _MONTHS_PER_FREQUENCY[Frequency.coerce(frequency)]


def period_delta(frequency: Frequency | str, periods: int = 1) -> relativedelta:
    """Offset covering ``periods`` billing periods (annual counts in years)."""
    frequency = Frequency.coerce(frequency)
    if frequency is Frequency.ANNUAL:
        return relativedelta(years=periods)
    return relativedelta(months=_MONTHS_PER_FREQUENCY[frequency] * periods)


def add_period(day: date, frequency: Frequency | str) -> date:
    """Advance ``day`` by one billing period."""
    return day + period_delta(frequency)


def add_anniversary_year(day: date) -> date:
    """
    Same calendar day one year later.

    A Feb 29 anniversary with no Feb 29 in the next year rolls over to
    Mar 1 instead of being clamped back to Feb 28.
    """
    if (day.month, day.day) == (2, 29):
        return date(day.year + 1, 3, 1)
    return add_period(day, Frequency.ANNUAL)


def snap_to_first_day(day: date) -> date:
    return day.replace(day=1)


def snap_to_last_day(day: date) -> date:
    """Last calendar day of ``day``'s month (leap years included)."""
    return day + relativedelta(day=31)


def days_between_inclusive(start: date, end: date) -> int:
    """
    Number of calendar days from ``start`` to ``end``, counting both ends.

    Jan 5 .. Jan 31 => 27. Returns 0 or a negative count when ``end``
    precedes ``start``.
    """
    return (end - start).days + 1


def period_length_days(start: date, frequency: Frequency | str) -> int:
    """
    Real calendar days of the billing period containing ``start``.

    The period runs from the first day of ``start``'s month to the last
    day of the month in which it ends (a quarterly period starting any
    day in March runs March 1 .. May 31).
    """
    first = snap_to_first_day(start)
    last = first + relativedelta(months=months_for_frequency(frequency)) - ONE_DAY
    return days_between_inclusive(first, last)


def same_month(first: date, second: date) -> bool:
    return (first.year, first.month) == (second.year, second.month)
