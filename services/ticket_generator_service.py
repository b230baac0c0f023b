"""
services/ticket_generator_service.py
------------------------------------
Generates the regular full-period ticket of every subscription whose
payment date has arrived, stamped with the service period it covers.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from models.billing import SubscriptionStatus
from models.subscription import Service, Subscription
from models.ticket import Ticket
from repositories.service_repo import ServiceRepository
from repositories.subscription_repo import SubscriptionRepository
from repositories.ticket_repo import DuplicateTicketError, TicketRepository
from services.service_period import calculate_service_period
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TicketGenerationDetail:
    subscription_id: str
    amount: float
    due_date: date
    status: str  # 'generated' | 'skipped' | 'error'
    service_name: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class TicketGenerationResult:
    generated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    details: list[TicketGenerationDetail] = field(default_factory=list)


@dataclass(frozen=True)
class SingleTicketGeneration:
    success: bool
    ticket: Optional[Ticket] = None
    error: Optional[str] = None


class TicketGeneratorService:
    """Emits due tickets for active subscriptions, one per payment date."""

    def __init__(
        self,
        subscription_repo: Optional[SubscriptionRepository] = None,
        service_repo: Optional[ServiceRepository] = None,
        ticket_repo: Optional[TicketRepository] = None,
    ):
        self.subscription_repo = subscription_repo or SubscriptionRepository()
        self.service_repo = service_repo or ServiceRepository()
        self.ticket_repo = ticket_repo or TicketRepository()

    def generate_automatic_tickets(self, today: Optional[date] = None) -> TicketGenerationResult:
        """
        Generate a ticket for every active subscription due on or before today.

        Subscriptions that already have an automatic ticket for their
        payment date are skipped. Failures are recorded per subscription.
        """
        today = today or date.today()
        result = TicketGenerationResult()
        due = [
            s for s in self.subscription_repo.get_active()
            if s.payment_date is not None and s.payment_date <= today
        ]
        if not due:
            logger.info("No active subscriptions with a due payment date")
            return result

        for subscription in due:
            try:
                self._generate_one(subscription, today, result)
            except Exception as e:
                error = f"Error in subscription {subscription.id}: {e}"
                logger.error(error)
                result.errors.append(error)
                result.details.append(TicketGenerationDetail(
                    subscription.id, 0.0, subscription.payment_date, "error", reason=error,
                ))

        logger.info(
            f"Ticket generation done: {result.generated} generated, "
            f"{result.skipped} skipped, {len(result.errors)} errors"
        )
        return result

    def generate_ticket_for_subscription(
        self, subscription_id: str, today: Optional[date] = None
    ) -> SingleTicketGeneration:
        """Generate the ticket of a single subscription for its stored payment date."""
        today = today or date.today()
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if subscription is None:
            return SingleTicketGeneration(False, error="Subscription not found")
        if subscription.status != SubscriptionStatus.ACTIVE:
            return SingleTicketGeneration(False, error="Subscription is not active")
        if subscription.payment_date is None:
            return SingleTicketGeneration(False, error="Subscription has no payment date")
        if self.ticket_repo.exists_for_due_date(subscription_id, subscription.payment_date):
            return SingleTicketGeneration(False, error="An automatic ticket already exists for this date")

        service = self.service_repo.get_by_id(subscription.service_id)
        if service is None:
            return SingleTicketGeneration(False, error="Service not found")

        try:
            ticket = self.ticket_repo.add(self._build_ticket(subscription, service, today))
        except DuplicateTicketError as e:
            return SingleTicketGeneration(False, error=str(e))
        return SingleTicketGeneration(True, ticket=ticket)

    # ── HELPERS ───────────────────────────────────────────

    def _generate_one(self, subscription: Subscription, today: date, result: TicketGenerationResult) -> None:
        service = self.service_repo.get_by_id(subscription.service_id)
        if service is None:
            raise KeyError(f"Service {subscription.service_id} not found")

        if self.ticket_repo.exists_for_due_date(subscription.id, subscription.payment_date):
            result.skipped += 1
            result.details.append(TicketGenerationDetail(
                subscription.id, service.invoice_price, subscription.payment_date, "skipped",
                service_name=service.name, reason="A ticket already exists for this date",
            ))
            return

        try:
            ticket = self.ticket_repo.add(self._build_ticket(subscription, service, today))
        except DuplicateTicketError:
            result.skipped += 1
            result.details.append(TicketGenerationDetail(
                subscription.id, service.invoice_price, subscription.payment_date, "skipped",
                service_name=service.name, reason="A ticket already covers this period",
            ))
            return

        result.generated += 1
        result.details.append(TicketGenerationDetail(
            subscription.id, ticket.amount, ticket.due_date, "generated", service_name=service.name,
        ))
        logger.info(f"Generated ticket for subscription {subscription.id}: {service.name} - {ticket.amount:.2f}")

    @staticmethod
    def _build_ticket(subscription: Subscription, service: Service, today: date) -> Ticket:
        period = calculate_service_period(
            subscription.payment_date, subscription.billing_type, service.frequency, service.name
        )
        return Ticket(
            subscription_id=subscription.id,
            due_date=subscription.payment_date,
            amount=service.invoice_price,
            description=period.description,
            generated_date=today,
            service_start=period.start,
            service_end=period.end,
        )
