"""
services/payment_date_service.py
--------------------------------
Keeps stored payment dates fresh.

A periodic sweep finds subscriptions whose payment date is missing or
already billed, rolls it forward and persists the new dates. Runs never
overlap: a sweep requested while another is in flight is skipped.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from config import BATCH_MAX_WORKERS, PAYMENT_DATE_UPDATE_INTERVAL_MINUTES
from repositories.service_repo import ServiceRepository
from repositories.subscription_repo import SubscriptionRepository
from services.payment_date_calculator import (
    PaymentDateRecalculation,
    advance_stale_payment_dates,
    calculate_payment_date,
    get_subscriptions_needing_recalculation,
)
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentDateUpdateError:
    subscription_id: str
    error: str


@dataclass
class PaymentDateUpdateResult:
    updated: int = 0
    failed: int = 0
    errors: list[PaymentDateUpdateError] = field(default_factory=list)


@dataclass(frozen=True)
class SinglePaymentDateUpdate:
    success: bool
    new_payment_date: Optional[date] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class PaymentDateStats:
    total: int
    with_valid_dates: int
    needing_update: int
    overdue: int


class PaymentDateService:
    """
    Refreshes subscription payment dates in bulk.

    Responsibilities:
        - Detect stale payment dates and roll them forward.
        - Persist the new dates concurrently, isolating failures.
        - Report payment date statistics.
        - Run the refresh on a timer.
    """

    def __init__(
        self,
        subscription_repo: Optional[SubscriptionRepository] = None,
        service_repo: Optional[ServiceRepository] = None,
        max_workers: int = BATCH_MAX_WORKERS,
    ):
        self.subscription_repo = subscription_repo or SubscriptionRepository()
        self.service_repo = service_repo or ServiceRepository()
        self.max_workers = max_workers
        self._update_in_progress = False
        self._guard = threading.Lock()

    @property
    def update_in_progress(self) -> bool:
        return self._update_in_progress

    def auto_update_payment_dates(self, today: Optional[date] = None) -> PaymentDateUpdateResult:
        """
        Roll forward every stale payment date of non-cancelled subscriptions.

        Returns an empty result without doing anything when another run
        is already in progress.
        """
        with self._guard:
            if self._update_in_progress:
                logger.info("Payment date update already in progress, skipping")
                return PaymentDateUpdateResult()
            self._update_in_progress = True

        logger.info("Starting automatic payment date update...")
        try:
            subscriptions = [s for s in self.subscription_repo.get_all() if not s.is_inactive()]
            services = self.service_repo.get_all()

            stale = get_subscriptions_needing_recalculation(subscriptions, services, today=today)
            if not stale:
                logger.info("No subscriptions need a payment date update")
                return PaymentDateUpdateResult()

            logger.info(f"Found {len(stale)} subscriptions needing a payment date update")
            result = self._update_in_batch(advance_stale_payment_dates(stale, services))
            logger.info(f"Payment date update done: {result.updated} updated, {result.failed} failed")
            return result
        except Exception as e:
            logger.error(f"Automatic payment date update failed: {e}")
            return PaymentDateUpdateResult(failed=1, errors=[PaymentDateUpdateError("all", str(e))])
        finally:
            self._update_in_progress = False

    def update_single_subscription_payment_date(self, subscription_id: str) -> SinglePaymentDateUpdate:
        """Recompute and store the payment date of one subscription from its start date."""
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if subscription is None:
            return SinglePaymentDateUpdate(False, error="Subscription not found")

        service = self.service_repo.get_by_id(subscription.service_id)
        if service is None:
            return SinglePaymentDateUpdate(False, error="Service not found")

        new_date = calculate_payment_date(subscription, service)
        if new_date is None:
            return SinglePaymentDateUpdate(False, error="Could not calculate payment date")

        self.subscription_repo.update_payment_date(subscription_id, new_date)
        return SinglePaymentDateUpdate(True, new_payment_date=new_date)

    def check_subscription_needs_update(self, subscription_id: str, today: Optional[date] = None) -> bool:
        """True if the subscription's stored payment date is missing or stale."""
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if subscription is None:
            logger.warning(f"Subscription {subscription_id} not found")
            return False
        return bool(get_subscriptions_needing_recalculation([subscription], today=today))

    def get_payment_date_stats(self, today: Optional[date] = None) -> PaymentDateStats:
        """Counts of non-cancelled subscriptions by payment date state."""
        today = today or date.today()
        active = [s for s in self.subscription_repo.get_all() if not s.is_inactive()]
        return PaymentDateStats(
            total=len(active),
            with_valid_dates=sum(1 for s in active if s.payment_date is not None),
            needing_update=len(get_subscriptions_needing_recalculation(active, today=today)),
            overdue=sum(1 for s in active if s.payment_date is not None and s.payment_date < today),
        )

    def schedule_auto_update(
        self, interval_minutes: float = PAYMENT_DATE_UPDATE_INTERVAL_MINUTES
    ) -> Callable[[], None]:
        """
        Run the update now and then every ``interval_minutes`` on a daemon thread.

        Returns:
            A function that cancels the schedule. It blocks until a run in
            progress has finished, so nothing is written after it returns.
        """
        logger.info(f"Scheduling payment date update every {interval_minutes} minutes")
        stop = threading.Event()

        def _loop() -> None:
            while not stop.is_set():
                self.auto_update_payment_dates()
                stop.wait(interval_minutes * 60)

        worker = threading.Thread(target=_loop, name="payment-date-auto-update", daemon=True)
        worker.start()

        def cancel() -> None:
            logger.info("Cancelling scheduled payment date update")
            stop.set()
            if worker is not threading.current_thread():
                worker.join()

        return cancel

    # ── HELPERS ───────────────────────────────────────────

    def _update_in_batch(self, recalculations: list[PaymentDateRecalculation]) -> PaymentDateUpdateResult:
        """Persist every computed date concurrently; entries without a date are skipped."""
        result = PaymentDateUpdateResult()
        valid = [r for r in recalculations if r.new_payment_date and r.subscription.id]
        if not valid:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(
                    self.subscription_repo.update_payment_date,
                    r.subscription.id,
                    r.new_payment_date,
                ): r.subscription.id
                for r in valid
            }
            for future in as_completed(futures):
                subscription_id = futures[future]
                try:
                    future.result()
                    result.updated += 1
                except Exception as e:
                    result.failed += 1
                    result.errors.append(PaymentDateUpdateError(subscription_id, str(e)))
                    logger.error(f"Failed to update subscription {subscription_id}: {e}")
        return result
