from datetime import date

import pytest

from models.billing import SubscriptionStatus
from services.payment_date_calculator import (
    advance_stale_payment_dates,
    calculate_next_payment_date,
    calculate_payment_date,
    calculate_payment_info,
    calculate_settlement_boundary_date,
    get_payment_status,
    get_subscriptions_needing_recalculation,
    recalculate_payment_dates,
    update_subscription_status,
)


class TestCalculatePaymentDate:
    def test_first_day_snapping_wins_over_raw_advance(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15))
        assert calculate_payment_date(sub, make_service()) == date(2025, 4, 1)

    def test_last_day_advance(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15))
        service = make_service(renovation="last_day")
        assert calculate_payment_date(sub, service) == date(2025, 4, 30)

    def test_arrears_adds_one_raw_period_after_snapping(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15), payment_type="arrears")
        service = make_service(renovation="last_day")
        # Apr 15 -> Apr 30 (snap) -> May 30 (no re-snap)
        assert calculate_payment_date(sub, service) == date(2025, 5, 30)

    def test_arrears_first_day(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15), payment_type="arrears")
        assert calculate_payment_date(sub, make_service()) == date(2025, 5, 1)

    def test_quarterly(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 1, 20))
        assert calculate_payment_date(sub, make_service(frequency="quarterly")) == date(2025, 4, 1)

    def test_annual_last_day(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2024, 2, 10))
        service = make_service(frequency="annual", renovation="last_day")
        assert calculate_payment_date(sub, service) == date(2025, 2, 28)

    def test_anniversary_is_one_year_unsnapped(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15), payment_type="anniversary")
        service = make_service(frequency="annual")
        assert calculate_payment_date(sub, service) == date(2026, 3, 15)

    def test_defaults_to_advance_and_first_day(self, make_subscription, make_service):
        sub = make_subscription(payment_type=None)
        service = make_service(renovation=None)
        assert calculate_payment_date(sub, service) == date(2025, 4, 1)

    def test_missing_start_date_returns_none(self, make_subscription, make_service):
        assert calculate_payment_date(make_subscription(start_date=None), make_service()) is None

    def test_missing_frequency_returns_none(self, make_subscription, make_service):
        assert calculate_payment_date(make_subscription(), make_service(frequency=None)) is None

    def test_unsupported_frequency_raises(self, make_subscription, make_service):
        with pytest.raises(ValueError, match="Unsupported frequency"):
            calculate_payment_date(make_subscription(), make_service(frequency="weekly"))

    def test_is_deterministic(self, make_subscription, make_service):
        sub, service = make_subscription(), make_service(renovation="last_day")
        assert calculate_payment_date(sub, service) == calculate_payment_date(sub, service)


class TestNextPaymentDate:
    def test_advance(self, make_service):
        assert calculate_next_payment_date(date(2025, 4, 1), make_service()) == date(2025, 5, 1)

    def test_arrears_steps_one_period(self, make_service):
        service = make_service(renovation="last_day")
        result = calculate_next_payment_date(date(2025, 5, 30), service, "arrears")
        assert result == date(2025, 6, 30)

    def test_arrears_consecutive_month_ends(self, make_service):
        service = make_service(renovation="last_day")
        dates = [date(2025, 5, 31)]
        for _ in range(3):
            dates.append(calculate_next_payment_date(dates[-1], service, "arrears"))
        assert dates[1:] == [date(2025, 6, 30), date(2025, 7, 31), date(2025, 8, 31)]

    def test_anniversary(self, make_service):
        result = calculate_next_payment_date(date(2026, 3, 15), make_service(), "anniversary")
        assert result == date(2027, 3, 15)

    def test_anniversary_from_leap_day(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2024, 2, 29), payment_type="anniversary")
        assert calculate_payment_date(sub, make_service(frequency="annual")) == date(2025, 3, 1)

    def test_missing_frequency(self, make_service):
        assert calculate_next_payment_date(date(2025, 4, 1), make_service(frequency=None)) is None

    def test_settlement_boundary_is_second_future_date(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 3, 15))
        assert calculate_settlement_boundary_date(sub, make_service()) == date(2025, 5, 1)

    def test_arrears_settlement_boundary_is_one_period_after_first_date(self, make_subscription, make_service):
        sub = make_subscription(start_date=date(2025, 6, 10), payment_type="arrears")
        service = make_service()
        assert calculate_payment_date(sub, service) == date(2025, 8, 1)
        assert calculate_settlement_boundary_date(sub, service) == date(2025, 9, 1)

    def test_settlement_boundary_missing_data(self, make_subscription, make_service):
        sub = make_subscription(start_date=None)
        assert calculate_settlement_boundary_date(sub, make_service()) is None


class TestRecalculation:
    def test_needing_recalculation(self, make_subscription, today):
        subs = [
            make_subscription(id="none", payment_date=None),
            make_subscription(id="today", payment_date=today),
            make_subscription(id="past", payment_date=date(2025, 6, 14)),
            make_subscription(id="future", payment_date=date(2025, 6, 16)),
        ]
        stale = get_subscriptions_needing_recalculation(subs, today=today)
        assert [s.id for s in stale] == ["none", "today", "past"]

    def test_needing_recalculation_accepts_services(self, make_subscription, make_service, today):
        subs = [make_subscription(payment_date=date(2025, 6, 14))]
        assert get_subscriptions_needing_recalculation(subs, [make_service()], today=today) == subs
        with pytest.raises(TypeError):
            get_subscriptions_needing_recalculation(subs, [make_service()], today)

    def test_recalculate_with_unmatched_service(self, make_subscription, make_service):
        subs = [
            make_subscription(id="a"),
            make_subscription(id="b", service_id="missing"),
        ]
        results = recalculate_payment_dates(subs, [make_service()])
        assert results[0].new_payment_date == date(2025, 4, 1)
        assert results[1].subscription.id == "b"
        assert results[1].new_payment_date is None

    def test_advance_stale_payment_dates(self, make_subscription, make_service):
        subs = [
            make_subscription(id="new", start_date=date(2025, 6, 10)),
            make_subscription(id="billed", payment_date=date(2025, 6, 1)),
            make_subscription(id="orphan", service_id="missing"),
        ]
        results = {r.subscription.id: r.new_payment_date for r in advance_stale_payment_dates(subs, [make_service()])}
        assert results == {
            "new": date(2025, 7, 1),
            "billed": date(2025, 7, 1),
            "orphan": None,
        }


class TestUpdateSubscriptionStatus:
    def test_past_end_date_expires(self, make_subscription, today):
        sub = make_subscription(end_date=date(2025, 6, 14))
        assert update_subscription_status(sub, today) is SubscriptionStatus.EXPIRED

    @pytest.mark.parametrize("end_date", [date(2025, 6, 15), date(2025, 12, 31)])
    def test_end_date_today_or_later_is_ending(self, make_subscription, today, end_date):
        sub = make_subscription(end_date=end_date)
        assert update_subscription_status(sub, today) is SubscriptionStatus.ENDING

    def test_no_end_date_active(self, make_subscription, today):
        assert update_subscription_status(make_subscription(), today) is SubscriptionStatus.ACTIVE

    def test_cancelled_without_end_date_stays_cancelled(self, make_subscription, today):
        sub = make_subscription(status="cancelled")
        assert update_subscription_status(sub, today) is SubscriptionStatus.CANCELLED

    def test_cancelled_without_end_date_legacy_expired(self, make_subscription, today):
        sub = make_subscription(status="cancelled")
        result = update_subscription_status(sub, today, expire_cancelled=True)
        assert result is SubscriptionStatus.EXPIRED


class TestPaymentStatus:
    def test_overdue(self, today):
        info = calculate_payment_info(date(2025, 6, 10), today)
        assert info.days_until_payment == -5
        assert info.is_overdue and info.should_recalculate
        status = get_payment_status(info)
        assert (status.status, status.text, status.color) == ("overdue", "Vencido (5 días)", "error")

    def test_due_today_needs_recalculation_but_is_not_overdue(self, today):
        info = calculate_payment_info(today, today)
        assert info.should_recalculate and not info.is_overdue
        assert get_payment_status(info).text == "Próximo (0 días)"

    def test_due_soon(self, today):
        status = get_payment_status(calculate_payment_info(date(2025, 6, 20), today))
        assert (status.status, status.text) == ("due", "Próximo (5 días)")

    def test_upcoming(self, today):
        status = get_payment_status(calculate_payment_info(date(2025, 7, 15), today))
        assert (status.status, status.text, status.color) == ("upcoming", "En 30 días", "success")

    def test_unknown(self, today):
        assert calculate_payment_info(None, today) is None
        assert get_payment_status(None).text == "Sin fecha de pago"
