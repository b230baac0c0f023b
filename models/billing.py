"""
models/billing.py
-----------------
Enumerations shared by every billing calculation: how often a service
is billed, where period boundaries snap to, and when an invoice is issued
relative to the period it pays for.
"""

from enum import Enum


class Frequency(str, Enum):
    """Recurrence interval of a billed service."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    FOUR_MONTHLY = "four_monthly"
    BIANNUAL = "biannual"
    ANNUAL = "annual"

    @classmethod
    def coerce(cls, value: "Frequency | str") -> "Frequency":
        """
        Convert a raw value (as stored on a service record) to a Frequency.

        Raises:
            ValueError: If the value is not a supported frequency.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported frequency: {value!r}") from None


class RenewalDayPolicy(str, Enum):
    """Day of month that billing period boundaries snap to."""
    FIRST_DAY = "first_day"
    LAST_DAY = "last_day"

    @classmethod
    def coerce(cls, value: "RenewalDayPolicy | str") -> "RenewalDayPolicy":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported renewal day policy: {value!r}") from None


class PaymentType(str, Enum):
    """
    When an invoice is issued relative to the service period it covers.

    ADVANCE bills before the period, ARREARS after it. ANNIVERSARY always
    bills a full year from the start-date anniversary, with no proration
    and no renewal-day snapping.
    """
    ADVANCE = "advance"
    ARREARS = "arrears"
    ANNIVERSARY = "anniversary"

    @classmethod
    def coerce(cls, value: "PaymentType | str") -> "PaymentType":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported payment type: {value!r}") from None


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    ENDING = "ending"
    EXPIRED = "expired"


class TicketStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
