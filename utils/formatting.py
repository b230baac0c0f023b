"""
utils/formatting.py
-------------------
Spanish text fragments used in invoice descriptions and payment status
labels. Dates are always rendered as dd/mm/yyyy.
"""

from datetime import date
from typing import Optional

from models.billing import Frequency, PaymentType

_FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.MONTHLY: "Mensual",
    Frequency.QUARTERLY: "Trimestral",
    Frequency.FOUR_MONTHLY: "Cuatrimestral",
    Frequency.BIANNUAL: "Semestral",
    Frequency.ANNUAL: "Anual",
}

_PAYMENT_TYPE_LABELS: dict[PaymentType, str] = {
    PaymentType.ADVANCE: "anticipado",
    PaymentType.ARREARS: "vencido",
    PaymentType.ANNIVERSARY: "aniversario",
}


def format_date(day: date) -> str:
    """Render a date as dd/mm/yyyy."""
    return day.strftime("%d/%m/%Y")


def format_date_range(start: date, end: date) -> str:
    return f"{format_date(start)} - {format_date(end)}"


def format_payment_date(day: Optional[date]) -> str:
    """Render a stored payment date for display, or 'Sin fecha' when unset."""
    if day is None:
        return "Sin fecha"
    return format_date(day)


def frequency_label(frequency: Frequency | str) -> str:
    return _FREQUENCY_LABELS[Frequency.coerce(frequency)]


def payment_type_label(payment_type: PaymentType | str) -> str:
    return _PAYMENT_TYPE_LABELS[PaymentType.coerce(payment_type)]
