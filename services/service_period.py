"""
services/service_period.py
--------------------------
Computes the calendar interval of service that an invoice pays for.

An advance invoice covers the period that starts at its payment date;
an arrears invoice covers the period that ends at it. Monthly periods
are anchored on calendar months rather than on the payment date.
"""

from datetime import date

from dateutil.relativedelta import relativedelta

from models.billing import Frequency, PaymentType
from models.ticket import ServicePeriod
from utils.formatting import format_date_range, frequency_label, payment_type_label
from utils.period_math import (
    ONE_DAY,
    add_anniversary_year,
    months_for_frequency,
    snap_to_first_day,
    snap_to_last_day,
)


def calculate_service_period(
    payment_date: date,
    payment_type: PaymentType | str,
    frequency: Frequency | str,
    service_name: str,
) -> ServicePeriod:
    """
    Service period covered by an invoice issued on ``payment_date``.

    Args:
        payment_date: Date the invoice is issued / due.
        payment_type: 'advance', 'arrears' or 'anniversary'.
        frequency: Billing frequency of the service.
        service_name: Prefix of the generated description.

    Returns:
        ServicePeriod with inclusive start/end and a description such as
        "Hosting - Trimestral anticipado (01/01/2025 - 31/03/2025)".

    Raises:
        ValueError: If the frequency or payment type is not supported.
    """
    payment_type = PaymentType.coerce(payment_type)
    months = months_for_frequency(frequency)

    if payment_type is PaymentType.ANNIVERSARY:
        start = payment_date
        end = add_anniversary_year(payment_date) - ONE_DAY
        label = frequency_label(Frequency.ANNUAL)
    elif payment_type is PaymentType.ADVANCE:
        start, end = _advance_period(payment_date, months)
        label = frequency_label(frequency)
    else:
        start, end = _arrears_period(payment_date, months)
        label = frequency_label(frequency)

    description = (
        f"{service_name} - {label} {payment_type_label(payment_type)} "
        f"({format_date_range(start, end)})"
    )
    return ServicePeriod(start=start, end=end, description=description)


def _advance_period(payment_date: date, months: int) -> tuple[date, date]:
    if months == 1:
        # Starts on the 1st of the payment month, ends on the last day of the following month.
        start = snap_to_first_day(payment_date)
        end = snap_to_last_day(start + relativedelta(months=1))
        return start, end
    return payment_date, payment_date + relativedelta(months=months) - ONE_DAY


def _arrears_period(payment_date: date, months: int) -> tuple[date, date]:
    if months == 1:
        # payment_date is expected to already be the month end
        return snap_to_first_day(payment_date), payment_date
    return payment_date - relativedelta(months=months) + ONE_DAY, payment_date


def is_date_in_service_period(day: date, period: ServicePeriod) -> bool:
    """True when ``day`` falls within the period, both ends inclusive."""
    return period.start <= day <= period.end


def get_next_service_period(
    current_period: ServicePeriod,
    frequency: Frequency | str,
    payment_type: PaymentType | str,
    service_name: str,
) -> ServicePeriod:
    """Service period of the invoice issued the day after ``current_period`` ends."""
    return calculate_service_period(
        current_period.end + ONE_DAY, payment_type, frequency, service_name
    )
