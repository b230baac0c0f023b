"""
services/automatic_ticket_service.py
------------------------------------
Business logic for emitting proportional (first-period) tickets.
Orchestrates between the pure calculators and the repositories.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from config import NEW_SUBSCRIPTION_WINDOW_DAYS
from models.subscription import Service, Subscription
from models.ticket import ProportionalTicketConfig
from repositories.service_repo import ServiceRepository
from repositories.subscription_repo import SubscriptionRepository
from repositories.ticket_repo import DuplicateTicketError, TicketRepository
from services.payment_date_calculator import calculate_settlement_boundary_date
from services.proportional_ticket import ProportionalTicketResult, evaluate_proportional_ticket
from utils.logger import get_logger
from utils.period_math import days_between_inclusive

logger = get_logger(__name__)


@dataclass
class SweepResult:
    """Totals of a backfill sweep; per-subscription failures land in `errors`."""
    processed: int = 0
    created: int = 0
    errors: list[str] = field(default_factory=list)


class AutomaticTicketService:
    """
    Handles proportional ticket generation.

    Workflow:
        1. Compute the settlement boundary (second future payment date).
        2. Run the proportional ticket decision.
        3. Persist the ticket, then move the subscription's payment date.
    """

    def __init__(
        self,
        subscription_repo: Optional[SubscriptionRepository] = None,
        service_repo: Optional[ServiceRepository] = None,
        ticket_repo: Optional[TicketRepository] = None,
    ):
        self.subscription_repo = subscription_repo or SubscriptionRepository()
        self.service_repo = service_repo or ServiceRepository()
        self.ticket_repo = ticket_repo or TicketRepository()

    @staticmethod
    def build_config(subscription: Subscription, service: Service) -> Optional[ProportionalTicketConfig]:
        """
        Proportional ticket input for a subscription, or None if its
        payment dates cannot be computed.
        """
        boundary = calculate_settlement_boundary_date(subscription, service)
        if boundary is None:
            return None
        return ProportionalTicketConfig(
            subscription_id=subscription.id,
            start_date=subscription.start_date,
            settlement_boundary_date=boundary,
            service_price=service.invoice_price,
            frequency=service.frequency,
            payment_type=subscription.billing_type,
            service_name=service.name,
        )

    def create_proportional_ticket(
        self, config: ProportionalTicketConfig, today: Optional[date] = None
    ) -> ProportionalTicketResult:
        """
        Evaluate and persist the proportional ticket of one subscription.

        Returns:
            The evaluation result; its `ticket` carries the stored id when created.
        """
        result = evaluate_proportional_ticket(config, self.ticket_repo.exists_for_period, today)
        if result.ticket is None:
            return result

        try:
            saved = self.ticket_repo.add(result.ticket)
        except DuplicateTicketError:
            logger.info(f"Proportional ticket for {config.subscription_id} was created concurrently")
            return ProportionalTicketResult(None, None, "ticket already exists")

        self.subscription_repo.update_payment_date(config.subscription_id, result.next_payment_date)
        logger.info(
            f"Created proportional ticket for {config.subscription_id}: "
            f"{result.days_used}/{result.total_days} days, {saved.amount:.2f}"
        )
        return replace(result, ticket=saved)

    def process_new_subscription_for_proportional_ticket(
        self, subscription_id: str, today: Optional[date] = None
    ) -> Optional[ProportionalTicketResult]:
        """
        Emit the proportional ticket of a newly created subscription.

        Subscriptions that started more than NEW_SUBSCRIPTION_WINDOW_DAYS ago
        are left to the backfill sweep.

        Raises:
            KeyError: If the subscription or its service does not exist.
        """
        today = today or date.today()
        subscription = self._get_subscription(subscription_id)
        service = self._get_service(subscription.service_id)

        if subscription.start_date is None:
            logger.info(f"Subscription {subscription_id} has no start date, skipping")
            return None

        if (today - subscription.start_date).days > NEW_SUBSCRIPTION_WINDOW_DAYS:
            logger.info(f"Subscription {subscription_id} is not recent, skipping proportional ticket")
            return None

        config = self.build_config(subscription, service)
        if config is None:
            return None
        return self.create_proportional_ticket(config, today)

    def process_all_subscriptions_for_missing_proportional_tickets(
        self, today: Optional[date] = None
    ) -> SweepResult:
        """
        Backfill proportional tickets for every active subscription.

        Failures are recorded per subscription and never abort the sweep.
        """
        today = today or date.today()
        result = SweepResult()
        subscriptions = self.subscription_repo.get_active()
        logger.info(f"Processing {len(subscriptions)} active subscriptions...")

        for subscription in subscriptions:
            result.processed += 1
            try:
                if subscription.start_date is None or subscription.payment_date is None:
                    continue
                if days_between_inclusive(subscription.start_date, subscription.payment_date) <= 0:
                    continue

                service = self._get_service(subscription.service_id)
                config = self.build_config(subscription, service)
                if config is None:
                    continue
                if self.create_proportional_ticket(config, today).created:
                    result.created += 1
            except Exception as e:
                logger.error(f"Failed to backfill subscription {subscription.id}: {e}")
                result.errors.append(f"Error in subscription {subscription.id}: {e}")

        logger.info(
            f"Backfill complete: {result.processed} processed, "
            f"{result.created} created, {len(result.errors)} errors"
        )
        return result

    # ── HELPERS ───────────────────────────────────────────

    def _get_subscription(self, subscription_id: str) -> Subscription:
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if subscription is None:
            raise KeyError(f"Subscription {subscription_id} not found")
        return subscription

    def _get_service(self, service_id: str) -> Service:
        service = self.service_repo.get_by_id(service_id)
        if service is None:
            raise KeyError(f"Service {service_id} not found")
        return service
