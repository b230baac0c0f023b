"""
models/ticket.py
----------------
Domain models for invoices ("tickets") and the calculation records
used to produce them.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.billing import Frequency, PaymentType, TicketStatus


def ticket_key(subscription_id: str, service_start: date, service_end: date) -> str:
    """
    Deterministic document key for an automatic ticket.

    Two tickets for the same subscription covering the same calendar
    interval share a key, so a store enforcing key uniqueness rejects
    the duplicate.
    """
    return f"{subscription_id}_{service_start:%Y%m%d}_{service_end:%Y%m%d}"


@dataclass(frozen=True)
class ServicePeriod:
    """Inclusive calendar interval an invoice pays for."""
    start: date
    end: date
    description: str

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Ticket:
    """
    An invoice issued for a subscription.

    Attributes:
        subscription_id: Subscription being billed.
        due_date: Date the invoice is due.
        amount: Amount due, rounded to cents.
        description: Human-readable text printed on the invoice.
        service_start: First day of service covered (inclusive).
        service_end: Last day of service covered (inclusive).
        generated_date: Date the invoice was produced.
        status: 'pending' | 'paid' | 'cancelled'.
        is_manual: False for tickets emitted by the automatic generators.
        id: Store identifier (None until persisted).
    """
    subscription_id: str
    due_date: date
    amount: float
    description: str
    generated_date: date
    service_start: Optional[date] = None
    service_end: Optional[date] = None
    status: TicketStatus = TicketStatus.PENDING
    is_manual: bool = False
    id: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        """Uniqueness key, or None for tickets without a service period."""
        if self.service_start is None or self.service_end is None:
            return None
        return ticket_key(self.subscription_id, self.service_start, self.service_end)

    def __str__(self) -> str:
        return f"{self.amount:.2f} | {self.due_date} | {self.description}"


@dataclass(frozen=True)
class ProportionalTicketConfig:
    """
    Input of the proportional ticket calculation.

    Attributes:
        subscription_id: Subscription being billed.
        start_date: Date service actually began.
        settlement_boundary_date: The subscription's SECOND future billing
            date (the payment that follows the first period). The
            proportional ticket settles [start_date, boundary - 1 day] and
            the subscription's stored payment date then moves to the boundary.
        service_price: Full-period price.
        frequency: Billing frequency of the service.
        payment_type: Payment type of the subscription.
        service_name: Service name, used in the ticket description.
    """
    subscription_id: str
    start_date: date
    settlement_boundary_date: date
    service_price: float
    frequency: Frequency | str
    payment_type: PaymentType | str = PaymentType.ADVANCE
    service_name: str = ""
