"""
models/subscription.py
----------------------
Domain models for billed services and the subscriptions that link
a client to one of them.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from config import DEFAULT_PAYMENT_TYPE, DEFAULT_RENOVATION
from models.billing import (
    Frequency,
    PaymentType,
    RenewalDayPolicy,
    SubscriptionStatus,
)


@dataclass(frozen=True)
class Service:
    """
    A billable service offered to clients.

    Attributes:
        id: Record identifier (None for unsaved records).
        name: Human-readable name, used in invoice descriptions.
        frequency: Billing frequency ('monthly', 'quarterly', ...). May be
            None on incomplete records; calculators then return None.
        renovation: Renewal day policy ('first_day' | 'last_day').
        base_price: Price before VAT/retention.
        final_price: Price after VAT/retention, preferred for invoicing.
        vat: VAT percentage applied to base_price.
    """
    name: str
    frequency: Optional[Frequency | str]
    base_price: float
    renovation: Optional[RenewalDayPolicy | str] = None
    final_price: Optional[float] = None
    vat: float = 0.0
    id: Optional[str] = None

    @property
    def renewal_policy(self) -> RenewalDayPolicy:
        """Renewal policy, falling back to the configured default."""
        return RenewalDayPolicy.coerce(self.renovation or DEFAULT_RENOVATION)

    @property
    def invoice_price(self) -> float:
        """Amount billed for one full period: final price when set, else base price."""
        return self.final_price if self.final_price else self.base_price


@dataclass(frozen=True)
class Subscription:
    """
    A client's subscription to a service.

    Attributes:
        id: Record identifier (None for unsaved records).
        client_id: Owning client.
        service_id: Linked Service id.
        start_date: Date service begins. May be None on incomplete records.
        payment_type: 'advance' | 'arrears' | 'anniversary'.
        payment_date: Currently stored next billing date, if any.
        end_date: Date the subscription stops, if scheduled.
        status: Stored lifecycle status.
    """
    client_id: str
    service_id: str
    start_date: Optional[date]
    payment_type: Optional[PaymentType | str] = None
    payment_date: Optional[date] = None
    end_date: Optional[date] = None
    status: SubscriptionStatus | str = SubscriptionStatus.ACTIVE
    id: Optional[str] = None

    @property
    def billing_type(self) -> PaymentType:
        """Payment type, falling back to the configured default."""
        return PaymentType.coerce(self.payment_type or DEFAULT_PAYMENT_TYPE)

    def is_inactive(self) -> bool:
        """Returns True if the subscription is cancelled or expired."""
        return self.status in (SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED)

    def __str__(self) -> str:
        return (
            f"Subscription #{self.id} ({self.service_id}) "
            f"from {self.start_date} - next payment: {self.payment_date or 'none'}"
        )
