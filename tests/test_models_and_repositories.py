from datetime import date

import pytest

from models.billing import PaymentType, RenewalDayPolicy
from models.ticket import Ticket, ticket_key
from repositories.ticket_repo import DuplicateTicketError
from utils.formatting import format_date, format_payment_date, frequency_label, payment_type_label


class TestModels:
    def test_invoice_price_prefers_final_price(self, make_service):
        assert make_service(final_price=121.0).invoice_price == 121.0
        assert make_service().invoice_price == 100.0

    def test_defaults(self, make_service, make_subscription):
        assert make_service(renovation=None).renewal_policy is RenewalDayPolicy.FIRST_DAY
        assert make_subscription(payment_type=None).billing_type is PaymentType.ADVANCE

    def test_unsupported_renewal_policy(self, make_service):
        with pytest.raises(ValueError, match="Unsupported renewal day policy"):
            make_service(renovation="same_day").renewal_policy

    def test_subscription_inactive(self, make_subscription):
        assert make_subscription(status="expired").is_inactive()
        assert not make_subscription().is_inactive()

    def test_ticket_key(self):
        assert ticket_key("sub-1", date(2025, 6, 10), date(2025, 7, 31)) == "sub-1_20250610_20250731"


def _ticket(**kwargs):
    defaults = {
        "subscription_id": "sub-1",
        "due_date": date(2025, 6, 15),
        "amount": 50.0,
        "description": "Hosting",
        "generated_date": date(2025, 6, 15),
        "service_start": date(2025, 6, 16),
        "service_end": date(2025, 6, 30),
    }
    defaults.update(kwargs)
    return Ticket(**defaults)


class TestTicketRepository:
    def test_key_is_unique(self, repos):
        saved = repos.tickets.add(_ticket())
        assert saved.id == "sub-1_20250616_20250630"
        with pytest.raises(DuplicateTicketError):
            repos.tickets.add(_ticket(amount=10.0))

    def test_exists_for_period_matches_exact_days(self, repos):
        repos.tickets.add(_ticket())
        assert repos.tickets.exists_for_period("sub-1", date(2025, 6, 16), date(2025, 6, 30))
        assert not repos.tickets.exists_for_period("sub-1", date(2025, 6, 16), date(2025, 6, 29))
        assert not repos.tickets.exists_for_period("sub-2", date(2025, 6, 16), date(2025, 6, 30))

    def test_manual_tickets_do_not_count_as_automatic(self, repos):
        repos.tickets.add(_ticket(is_manual=True, service_start=None, service_end=None))
        assert not repos.tickets.exists_for_due_date("sub-1", date(2025, 6, 15))
        assert repos.tickets.exists_for_due_date("sub-1", date(2025, 6, 15), automatic_only=False)

    def test_delete(self, repos):
        saved = repos.tickets.add(_ticket())
        assert repos.tickets.delete(saved.id)
        assert not repos.tickets.delete(saved.id)


def test_update_unknown_subscription(repos):
    with pytest.raises(KeyError):
        repos.subscriptions.update_payment_date("nope", date(2025, 7, 1))


class TestFormatting:
    def test_dates(self):
        assert format_date(date(2025, 3, 5)) == "05/03/2025"
        assert format_payment_date(None) == "Sin fecha"

    def test_labels(self):
        assert frequency_label("four_monthly") == "Cuatrimestral"
        assert frequency_label("biannual") == "Semestral"
        assert payment_type_label("arrears") == "vencido"
