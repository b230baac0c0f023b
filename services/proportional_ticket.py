"""
services/proportional_ticket.py
-------------------------------
Decides whether a subscription owes a pro-rated ticket for the partial
period between its start date and its settlement boundary, and builds
that ticket.

The calculation is pure: the existing-ticket lookup is passed in, and
persisting the returned ticket and payment date is left to the caller
(see services/automatic_ticket_service.py).
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from models.billing import Frequency, PaymentType
from models.ticket import ProportionalTicketConfig, Ticket
from services.service_period import calculate_service_period
from utils.formatting import format_date_range
from utils.logger import get_logger
from utils.period_math import (
    ONE_DAY,
    add_anniversary_year,
    add_period,
    days_between_inclusive,
    period_length_days,
    same_month,
)

logger = get_logger(__name__)

# (subscription_id, service_start, service_end) -> a ticket already covers it
TicketExistsLookup = Callable[[str, date, date], bool]

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class ProportionalTicketResult:
    """
    Outcome of a proportional ticket evaluation.

    Attributes:
        ticket: Ticket to persist, or None when nothing is owed.
        next_payment_date: Payment date the subscription must be moved to
            once the ticket is persisted (None when no ticket).
        reason: Short explanation of the branch taken.
        days_used: Days billed.
        total_days: Days of the full billing period used as denominator.
    """
    ticket: Optional[Ticket]
    next_payment_date: Optional[date]
    reason: str
    days_used: int = 0
    total_days: int = 0

    @property
    def created(self) -> bool:
        return self.ticket is not None


def _skip(reason: str) -> ProportionalTicketResult:
    logger.info(f"No proportional ticket: {reason}")
    return ProportionalTicketResult(ticket=None, next_payment_date=None, reason=reason)


def calculate_proportional_price(base_price: float, days_used: int, total_days: int) -> float:
    """
    Price of ``days_used`` days out of a ``total_days`` period, rounded to cents.

    The proportion is capped at 1, so a partial period never costs more
    than a full one.
    """
    if days_used <= 0 or total_days <= 0:
        return 0.0
    proportion = min(Decimal(days_used) / Decimal(total_days), Decimal(1))
    price = (Decimal(str(base_price)) * proportion).quantize(_CENT, rounding=ROUND_HALF_UP)
    return float(price)


def proportional_description(
    service_name: str, start: date, end: date, days_used: int, total_days: int
) -> str:
    return (
        f"{service_name} - Período ({format_date_range(start, end)}) "
        f"- {days_used}/{total_days} días"
    )


def evaluate_proportional_ticket(
    config: ProportionalTicketConfig,
    ticket_exists: TicketExistsLookup,
    today: Optional[date] = None,
) -> ProportionalTicketResult:
    """
    Run the proportional ticket decision for one subscription.

    Args:
        config: Subscription dates and pricing. ``settlement_boundary_date``
            must be the second future billing date
            (see payment_date_calculator.calculate_settlement_boundary_date).
        ticket_exists: Lookup reporting whether a ticket already covers an
            exact (subscription, start, end) interval. Treated as authoritative.
        today: Reference day (defaults to the current date).

    Returns:
        ProportionalTicketResult describing the ticket to emit, if any.
    """
    today = today or date.today()
    start = config.start_date
    boundary = config.settlement_boundary_date

    if start > today:
        return _skip(f"subscription {config.subscription_id} starts in the future ({start})")

    if PaymentType.coerce(config.payment_type) is PaymentType.ANNIVERSARY:
        return _anniversary_ticket(config, ticket_exists, today)

    if start > boundary:
        logger.warning(
            f"Subscription {config.subscription_id} starts after its payment date "
            f"({start} > {boundary}), skipping"
        )
        return ProportionalTicketResult(None, None, "start date after payment date")

    if start == boundary:
        if boundary > today:
            return _skip(f"first full period of {config.subscription_id} is still in the future")
        return _full_period_ticket(config, ticket_exists, today)

    return _prorated_ticket(config, ticket_exists, today)


def _prorated_ticket(
    config: ProportionalTicketConfig, ticket_exists: TicketExistsLookup, today: date
) -> ProportionalTicketResult:
    start = config.start_date
    end = config.settlement_boundary_date - ONE_DAY
    days_used = days_between_inclusive(start, end)
    if days_used <= 0:
        return _skip("no days to bill")

    if ticket_exists(config.subscription_id, start, end):
        return _skip(f"ticket already exists for {config.subscription_id} ({start} - {end})")

    total_days = period_length_days(start, config.frequency)
    if start.day == 1 and same_month(start, config.settlement_boundary_date):
        price = config.service_price
    else:
        price = calculate_proportional_price(config.service_price, days_used, total_days)

    if price <= 0:
        return _skip("calculated price is 0")

    ticket = Ticket(
        subscription_id=config.subscription_id,
        due_date=today,
        amount=price,
        description=proportional_description(config.service_name, start, end, days_used, total_days),
        generated_date=today,
        service_start=start,
        service_end=end,
    )
    return ProportionalTicketResult(
        ticket=ticket,
        next_payment_date=config.settlement_boundary_date,
        reason="prorated",
        days_used=days_used,
        total_days=total_days,
    )


def _full_period_ticket(
    config: ProportionalTicketConfig, ticket_exists: TicketExistsLookup, today: date
) -> ProportionalTicketResult:
    """
    Bill one whole period starting on the start date.

    The next payment date is the day after that period, not the boundary
    passed in: the boundary equals the start date here and is already billed.
    """
    start = config.start_date
    end = add_period(start, config.frequency) - ONE_DAY
    if ticket_exists(config.subscription_id, start, end):
        return _skip(f"ticket already exists for {config.subscription_id} ({start} - {end})")

    if config.service_price <= 0:
        return _skip("calculated price is 0")

    days = days_between_inclusive(start, end)
    ticket = Ticket(
        subscription_id=config.subscription_id,
        due_date=today,
        amount=config.service_price,
        description=proportional_description(config.service_name, start, end, days, days),
        generated_date=today,
        service_start=start,
        service_end=end,
    )
    return ProportionalTicketResult(
        ticket=ticket,
        next_payment_date=end + ONE_DAY,
        reason="full period",
        days_used=days,
        total_days=days,
    )


def _anniversary_ticket(
    config: ProportionalTicketConfig, ticket_exists: TicketExistsLookup, today: date
) -> ProportionalTicketResult:
    start = config.start_date
    next_payment = add_anniversary_year(start)
    end = next_payment - ONE_DAY
    if ticket_exists(config.subscription_id, start, end):
        return _skip(f"ticket already exists for {config.subscription_id} ({start} - {end})")

    period = calculate_service_period(
        start, PaymentType.ANNIVERSARY, Frequency.ANNUAL, config.service_name
    )
    days = days_between_inclusive(start, end)
    ticket = Ticket(
        subscription_id=config.subscription_id,
        due_date=start,
        amount=config.service_price,
        description=period.description,
        generated_date=today,
        service_start=start,
        service_end=end,
    )
    return ProportionalTicketResult(
        ticket=ticket,
        next_payment_date=next_payment,
        reason="anniversary",
        days_used=days,
        total_days=days,
    )
