"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions.
"""

import threading
import uuid
from dataclasses import replace
from datetime import date
from typing import Optional

from models.billing import SubscriptionStatus
from models.subscription import Subscription
from utils.logger import get_logger

logger = get_logger(__name__)


class SubscriptionRepository:
    """Repository for CRUD operations on subscriptions."""

    def __init__(self):
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()

    # ── CREATE ────────────────────────────────────────────

    def add(self, subscription: Subscription) -> Subscription:
        """
        Insert a subscription.

        Returns:
            The stored subscription, with an `id` assigned if it had none.
        """
        saved = subscription if subscription.id else replace(subscription, id=uuid.uuid4().hex)
        with self._lock:
            self._subscriptions[saved.id] = saved
        logger.info(f"Added subscription #{saved.id}")
        return saved

    # ── READ ──────────────────────────────────────────────

    def get_all(self) -> list[Subscription]:
        with self._lock:
            return list(self._subscriptions.values())

    def get_active(self) -> list[Subscription]:
        return [s for s in self.get_all() if s.status == SubscriptionStatus.ACTIVE]

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        with self._lock:
            return self._subscriptions.get(subscription_id)

    # ── UPDATE ────────────────────────────────────────────

    def update_payment_date(self, subscription_id: str, payment_date: date) -> Subscription:
        """
        Store a new next-billing date for a subscription.

        Raises:
            KeyError: If the subscription does not exist.
        """
        with self._lock:
            current = self._subscriptions.get(subscription_id)
            if current is None:
                raise KeyError(f"Subscription {subscription_id} not found")
            updated = replace(current, payment_date=payment_date)
            self._subscriptions[subscription_id] = updated
        logger.info(f"Advanced subscription #{subscription_id} payment date to {payment_date}")
        return updated

