"""
repositories/ticket_repo.py
---------------------------
Data access layer for tickets (invoices).

Automatic tickets are stored under a deterministic key derived from
(subscription, service start, service end); inserting a second ticket
for the same key fails, which is what keeps concurrent generators from
double-billing a period.
"""

import threading
import uuid
from dataclasses import replace
from datetime import date
from typing import Optional

from models.ticket import Ticket, ticket_key
from utils.logger import get_logger

logger = get_logger(__name__)


class DuplicateTicketError(ValueError):
    """A ticket already exists for the same subscription and service period."""


class TicketRepository:
    """Repository for CRUD operations on tickets."""

    def __init__(self):
        self._tickets: dict[str, Ticket] = {}
        self._lock = threading.Lock()

    # ── CREATE ────────────────────────────────────────────

    def add(self, ticket: Ticket) -> Ticket:
        """
        Insert a new ticket.

        Args:
            ticket: The Ticket to persist.

        Returns:
            A copy of the ticket with its `id` populated.

        Raises:
            DuplicateTicketError: If a ticket with the same key exists.
        """
        with self._lock:
            ticket_id = ticket.key or uuid.uuid4().hex
            if ticket_id in self._tickets:
                logger.error(f"Duplicate ticket rejected: {ticket_id}")
                raise DuplicateTicketError(f"Ticket {ticket_id} already exists")
            saved = replace(ticket, id=ticket_id)
            self._tickets[ticket_id] = saved
        logger.info(f"Added ticket #{ticket_id} ({saved.amount:.2f})")
        return saved

    # ── READ ──────────────────────────────────────────────

    def get_all(self) -> list[Ticket]:
        with self._lock:
            return sorted(self._tickets.values(), key=lambda t: t.due_date)

    def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        with self._lock:
            return self._tickets.get(ticket_id)

    def get_by_subscription(self, subscription_id: str) -> list[Ticket]:
        """All tickets of a subscription, oldest due date first."""
        return [t for t in self.get_all() if t.subscription_id == subscription_id]

    def exists_for_period(self, subscription_id: str, service_start: date, service_end: date) -> bool:
        """True if a ticket covers exactly [service_start, service_end] for the subscription."""
        with self._lock:
            return ticket_key(subscription_id, service_start, service_end) in self._tickets

    def exists_for_due_date(self, subscription_id: str, due_date: date, automatic_only: bool = True) -> bool:
        """True if the subscription already has a ticket due on ``due_date``."""
        return any(
            t.due_date == due_date and not (automatic_only and t.is_manual)
            for t in self.get_by_subscription(subscription_id)
        )

    # ── DELETE ────────────────────────────────────────────

    def delete(self, ticket_id: str) -> bool:
        """Delete a ticket by ID."""
        with self._lock:
            deleted = self._tickets.pop(ticket_id, None) is not None
        if deleted:
            logger.info(f"Deleted ticket #{ticket_id}")
        return deleted
