"""
services/payment_date_calculator.py
-----------------------------------
Pure functions computing a subscription's next payment date and the
payment status derived from it.

Every function that depends on "today" takes it as an optional argument
and reads the clock once, at call time, when it is omitted.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from config import PAYMENT_DUE_SOON_DAYS
from models.billing import PaymentType, RenewalDayPolicy, SubscriptionStatus
from models.subscription import Service, Subscription
from utils.logger import get_logger
from utils.period_math import (
    add_anniversary_year,
    add_period,
    snap_to_first_day,
    snap_to_last_day,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentDateRecalculation:
    """A subscription paired with its recomputed payment date (None = skip)."""
    subscription: Subscription
    new_payment_date: Optional[date]


@dataclass(frozen=True)
class PaymentDateCalculation:
    next_payment_date: date
    should_recalculate: bool
    is_overdue: bool
    days_until_payment: int


@dataclass(frozen=True)
class PaymentStatus:
    status: str  # 'upcoming' | 'due' | 'overdue' | 'unknown'
    text: str
    color: str  # 'success' | 'warning' | 'error' | 'default'


def _step(anchor: date, service: Service, payment_type: PaymentType) -> date:
    """
    Advance ``anchor`` by one period and snap it to the renewal day.

    Anniversary moves exactly one year and never snaps.
    """
    if payment_type is PaymentType.ANNIVERSARY:
        return add_anniversary_year(anchor)

    next_date = add_period(anchor, service.frequency)
    if service.renewal_policy is RenewalDayPolicy.FIRST_DAY:
        return snap_to_first_day(next_date)
    return snap_to_last_day(next_date)


def _first_payment_date(start: date, service: Service, payment_type: PaymentType) -> date:
    # arrears bills the first period at its end: one more raw shift, no re-snap
    first = _step(start, service, payment_type)
    if payment_type is PaymentType.ARREARS:
        first = add_period(first, service.frequency)
    return first


def calculate_payment_date(subscription: Subscription, service: Service) -> Optional[date]:
    """
    Compute the next payment date of a subscription from its start date.

    Args:
        subscription: Subscription whose start date and payment type are read.
        service: Linked service providing frequency and renewal policy.

    Returns:
        The next payment date, or None when the start date or the service
        frequency is missing.

    Raises:
        ValueError: If the frequency, renewal policy or payment type is
            not supported.
    """
    if subscription.start_date is None or not service.frequency:
        logger.warning(f"Missing data to calculate payment date for subscription {subscription.id}")
        return None
    return _first_payment_date(subscription.start_date, service, subscription.billing_type)


def calculate_next_payment_date(
    current_payment_date: date,
    service: Service,
    payment_type: PaymentType | str = PaymentType.ADVANCE,
) -> Optional[date]:
    """
    Compute the payment date that follows ``current_payment_date``.

    Exactly one billing period later, snapped to the renewal day. The
    extra arrears shift of calculate_payment_date only applies to the
    first date derived from the start date, never to later steps.
    """
    if not service.frequency:
        logger.warning(f"Missing frequency for service {service.id}")
        return None
    return _step(current_payment_date, service, PaymentType.coerce(payment_type))


def calculate_settlement_boundary_date(
    subscription: Subscription, service: Service
) -> Optional[date]:
    """
    Second future billing date of a subscription.

    This is the date a proportional ticket settles up to: the first
    computed payment date, advanced once more.
    """
    first = calculate_payment_date(subscription, service)
    if first is None:
        return None
    return calculate_next_payment_date(first, service, subscription.billing_type)


def get_subscriptions_needing_recalculation(
    subscriptions: Iterable[Subscription],
    services: Optional[Iterable[Service]] = None,
    *,
    today: Optional[date] = None,
) -> list[Subscription]:
    """
    Subscriptions whose stored payment date is missing or stale.

    A payment date on or before today is stale: it has already been
    billed and must be recomputed before it is trusted again. ``services``
    is accepted for call-site compatibility and not read.
    """
    today = today or date.today()
    return [
        s for s in subscriptions
        if s.payment_date is None or s.payment_date <= today
    ]


def recalculate_payment_dates(
    subscriptions: Iterable[Subscription], services: Iterable[Service]
) -> list[PaymentDateRecalculation]:
    """
    Recompute the payment date of each subscription with its linked service.

    Entries with no matching service, or whose date cannot be computed,
    carry ``new_payment_date=None``; callers must not persist those.
    """
    services_by_id = {s.id: s for s in services}
    results: list[PaymentDateRecalculation] = []
    for subscription in subscriptions:
        service = services_by_id.get(subscription.service_id)
        if service is None:
            logger.warning(f"Service not found for subscription {subscription.id}")
            results.append(PaymentDateRecalculation(subscription, None))
            continue
        results.append(
            PaymentDateRecalculation(subscription, calculate_payment_date(subscription, service))
        )
    return results


def advance_stale_payment_dates(
    subscriptions: Iterable[Subscription], services: Iterable[Service]
) -> list[PaymentDateRecalculation]:
    """
    Move each subscription's payment date one billing step forward.

    Subscriptions without a stored payment date get their first one from
    the start date; the others advance from the stored date, since a
    ticket has already been issued for it.
    """
    services_by_id = {s.id: s for s in services}
    results: list[PaymentDateRecalculation] = []
    for subscription in subscriptions:
        service = services_by_id.get(subscription.service_id)
        if service is None:
            logger.warning(f"Service not found for subscription {subscription.id}")
            new_date = None
        elif subscription.payment_date is None:
            new_date = calculate_payment_date(subscription, service)
        else:
            new_date = calculate_next_payment_date(
                subscription.payment_date, service, subscription.billing_type
            )
        results.append(PaymentDateRecalculation(subscription, new_date))
    return results


def update_subscription_status(
    subscription: Subscription,
    today: Optional[date] = None,
    expire_cancelled: bool = False,
) -> SubscriptionStatus:
    """
    Derive a subscription's status from its end date.

    Args:
        subscription: Subscription to inspect.
        today: Reference day (defaults to the current date).
        expire_cancelled: Two legacy call sites disagree on a cancelled
            subscription without an end date. False keeps it 'cancelled',
            True maps it to 'expired'.

    Returns:
        'expired' when the end date has passed, 'ending' when it is today
        or later, otherwise 'cancelled' (or 'expired') for cancelled
        subscriptions and 'active' for the rest.
    """
    today = today or date.today()
    if subscription.end_date is not None:
        if subscription.end_date < today:
            return SubscriptionStatus.EXPIRED
        return SubscriptionStatus.ENDING
    if subscription.status == SubscriptionStatus.CANCELLED:
        return SubscriptionStatus.EXPIRED if expire_cancelled else SubscriptionStatus.CANCELLED
    return SubscriptionStatus.ACTIVE


def calculate_payment_info(
    payment_date: Optional[date], today: Optional[date] = None
) -> Optional[PaymentDateCalculation]:
    """Days until a payment date and whether it is overdue or stale."""
    if payment_date is None:
        return None
    today = today or date.today()
    days_until = (payment_date - today).days
    return PaymentDateCalculation(
        next_payment_date=payment_date,
        should_recalculate=payment_date <= today,
        is_overdue=days_until < 0,
        days_until_payment=days_until,
    )


def get_payment_status(calculation: Optional[PaymentDateCalculation]) -> PaymentStatus:
    """Display status for a payment date calculation."""
    if calculation is None:
        return PaymentStatus("unknown", "Sin fecha de pago", "default")

    days = calculation.days_until_payment
    if calculation.is_overdue:
        return PaymentStatus("overdue", f"Vencido ({abs(days)} días)", "error")
    if days <= PAYMENT_DUE_SOON_DAYS:
        return PaymentStatus("due", f"Próximo ({days} días)", "warning")
    return PaymentStatus("upcoming", f"En {days} días", "success")
