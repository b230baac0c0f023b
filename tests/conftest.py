from datetime import date
from types import SimpleNamespace

import pytest

from models.subscription import Service, Subscription
from repositories.service_repo import ServiceRepository
from repositories.subscription_repo import SubscriptionRepository
from repositories.ticket_repo import TicketRepository

# Every test pins "today"; nothing reads the real clock.
TODAY = date(2025, 6, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_service():
    """Factory for services; monthly, first-day renewal, 100.00 by default."""
    def _make(**kwargs):
        defaults = {
            "id": "svc-1",
            "name": "Hosting",
            "frequency": "monthly",
            "renovation": "first_day",
            "base_price": 100.0,
        }
        defaults.update(kwargs)
        return Service(**defaults)
    return _make


@pytest.fixture
def make_subscription():
    """Factory for subscriptions; active, advance, linked to svc-1 by default."""
    def _make(**kwargs):
        defaults = {
            "id": "sub-1",
            "client_id": "client-1",
            "service_id": "svc-1",
            "start_date": date(2025, 3, 15),
            "payment_type": "advance",
        }
        defaults.update(kwargs)
        return Subscription(**defaults)
    return _make


@pytest.fixture
def repos():
    return SimpleNamespace(
        subscriptions=SubscriptionRepository(),
        services=ServiceRepository(),
        tickets=TicketRepository(),
    )
