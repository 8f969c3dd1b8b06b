"""
Unit tests for the threshold evaluator and its pure helpers.

The evaluator is wired to in-memory fakes here, so none of these tests
touch the database.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from models.budget_alerts import BudgetAlert
from models.enums import AlertType
from services.alert_service import (
    ThresholdEvaluator,
    calculate_percentage,
    determine_status,
    render_alert_message,
)
from utils.clock import FixedClock

NOW = datetime(2024, 6, 15, 12, 0, 0)


def _budget(**overrides):
    defaults = dict(
        id=1,
        cif_id='CIF001',
        category='Food, drinks',
        budget_amount=Decimal('10000.00'),
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        alert_threshold_80=True,
        alert_threshold_100=True,
    )
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


class FakeAlertStore:
    """Records saved alerts and answers the dedup question from them."""

    def __init__(self):
        self.saved = []
        self.sent = []  # (budget_id, alert_type, sent_at)

    def has_recent_alert(self, budget_id, alert_type, since):
        return any(
            b == budget_id and t == alert_type and sent_at >= since
            for b, t, sent_at in self.sent
        )

    def save_alert(self, alert):
        self.saved.append(alert)
        return alert


@pytest.fixture
def store():
    return FakeAlertStore()


@pytest.fixture
def evaluator(store):
    return ThresholdEvaluator(store.has_recent_alert, store.save_alert, clock=FixedClock(NOW))


# ---------------------------------------------------------------------------
# calculate_percentage
# ---------------------------------------------------------------------------

class TestCalculatePercentage:
    def test_simple_ratio(self):
        assert calculate_percentage(Decimal('8500.00'), Decimal('10000.00')) == 85

    def test_rounds_half_up(self):
        # 7995 / 10000 = 79.95 -> 80
        assert calculate_percentage(Decimal('7995.00'), Decimal('10000.00')) == 80
        # 0.5% exactly rounds up too
        assert calculate_percentage(Decimal('50.00'), Decimal('10000.00')) == 1

    def test_just_below_half_rounds_down(self):
        assert calculate_percentage(Decimal('7949.99'), Decimal('10000.00')) == 79

    def test_zero_total_is_zero(self):
        assert calculate_percentage(Decimal('500.00'), Decimal('0')) == 0

    def test_missing_total_is_zero(self):
        assert calculate_percentage(Decimal('500.00'), None) == 0

    def test_missing_amount_is_zero(self):
        assert calculate_percentage(None, Decimal('100.00')) == 0

    def test_never_negative(self):
        assert calculate_percentage(Decimal('-20.00'), Decimal('100.00')) == 0

    def test_over_one_hundred(self):
        assert calculate_percentage(Decimal('15000.00'), Decimal('10000.00')) == 150


# ---------------------------------------------------------------------------
# determine_status
# ---------------------------------------------------------------------------

class TestDetermineStatus:
    @pytest.mark.parametrize('percentage,expected', [
        (0, 'ON_TRACK'),
        (79, 'ON_TRACK'),
        (80, 'WARNING'),
        (99, 'WARNING'),
        (100, 'EXCEEDED'),
        (150, 'EXCEEDED'),
    ])
    def test_status_boundaries(self, percentage, expected):
        assert determine_status(percentage) == expected


# ---------------------------------------------------------------------------
# Alert types and message
# ---------------------------------------------------------------------------

class TestAlertTypes:
    def test_threshold_percentages(self):
        assert AlertType.THRESHOLD_80.threshold_percentage == 80
        assert AlertType.THRESHOLD_100.threshold_percentage == 100
        assert AlertType.EXCEEDED.threshold_percentage == 101

    def test_message_format(self):
        message = render_alert_message(
            AlertType.THRESHOLD_80, 85, Decimal('8500.00'), 'Food, drinks', Decimal('10000.00')
        )
        assert message == (
            "Budget alert: 80% budget reached - You've used 85% (8500.00) "
            "of your Food, drinks budget (10000.00)"
        )


# ---------------------------------------------------------------------------
# ThresholdEvaluator.evaluate
# ---------------------------------------------------------------------------

class TestEvaluate:
    def test_below_eighty_creates_nothing(self, evaluator, store):
        assert evaluator.evaluate(_budget(), Decimal('7900.00')) is None
        assert store.saved == []

    def test_eighty_five_percent_creates_threshold_80(self, evaluator, store):
        alert = evaluator.evaluate(_budget(), Decimal('8500.00'))

        assert isinstance(alert, BudgetAlert)
        assert alert.alert_type == AlertType.THRESHOLD_80
        assert alert.percentage_used == 85
        assert alert.current_spending == Decimal('8500.00')
        assert alert.budget_limit == Decimal('10000.00')
        assert alert.is_sent is False
        assert alert.channels == ['SMS', 'EMAIL', 'PUSH']
        assert alert.created_at == NOW
        assert alert.cif_id == 'CIF001'
        assert alert.category == 'Food, drinks'
        assert store.saved == [alert]

    def test_exactly_eighty_creates_threshold_80(self, evaluator):
        alert = evaluator.evaluate(_budget(), Decimal('8000.00'))
        assert alert.alert_type == AlertType.THRESHOLD_80

    def test_exactly_one_hundred_creates_threshold_100(self, evaluator, store):
        alert = evaluator.evaluate(_budget(), Decimal('10000.00'))
        assert alert.alert_type == AlertType.THRESHOLD_100
        assert len(store.saved) == 1

    def test_over_one_hundred_creates_exceeded_only(self, evaluator, store):
        alert = evaluator.evaluate(_budget(), Decimal('15000.00'))
        assert alert.alert_type == AlertType.EXCEEDED
        assert alert.percentage_used == 150
        assert [a.alert_type for a in store.saved] == [AlertType.EXCEEDED]

    def test_rounding_to_one_hundred_is_threshold_100(self, evaluator):
        # 100.4% rounds to 100
        alert = evaluator.evaluate(_budget(), Decimal('10040.00'))
        assert alert.alert_type == AlertType.THRESHOLD_100

    def test_eighty_toggle_off_suppresses_warning(self, evaluator, store):
        assert evaluator.evaluate(_budget(alert_threshold_80=False), Decimal('8500.00')) is None
        assert store.saved == []

    def test_hundred_toggle_off_suppresses_limit_alerts(self, evaluator, store):
        assert evaluator.evaluate(_budget(alert_threshold_100=False), Decimal('15000.00')) is None
        assert store.saved == []

    def test_zero_budget_amount_never_alerts(self, evaluator, store):
        assert evaluator.evaluate(_budget(budget_amount=Decimal('0')), Decimal('500.00')) is None
        assert store.saved == []

    def test_missing_spending_counts_as_zero(self, evaluator, store):
        assert evaluator.evaluate(_budget(), None) is None
        assert store.saved == []

    def test_save_failure_propagates(self, store):
        def failing_save(alert):
            raise RuntimeError('database unavailable')

        evaluator = ThresholdEvaluator(store.has_recent_alert, failing_save, clock=FixedClock(NOW))
        with pytest.raises(RuntimeError, match='database unavailable'):
            evaluator.evaluate(_budget(), Decimal('8500.00'))

    def test_custom_channels(self, store):
        evaluator = ThresholdEvaluator(
            store.has_recent_alert, store.save_alert, clock=FixedClock(NOW), channels=['SMS'],
        )
        alert = evaluator.evaluate(_budget(), Decimal('8500.00'))
        assert alert.notification_channels == 'SMS'


# ---------------------------------------------------------------------------
# Deduplication window
# ---------------------------------------------------------------------------

class TestDeduplication:
    def test_sent_alert_inside_window_suppresses(self, evaluator, store):
        store.sent.append((1, AlertType.THRESHOLD_80, NOW - timedelta(hours=2)))
        assert evaluator.evaluate(_budget(), Decimal('8500.00')) is None
        assert store.saved == []

    def test_sent_alert_outside_window_does_not_suppress(self, evaluator, store):
        store.sent.append((1, AlertType.THRESHOLD_80, NOW - timedelta(hours=25)))
        alert = evaluator.evaluate(_budget(), Decimal('8500.00'))
        assert alert is not None

    def test_other_alert_type_does_not_suppress(self, evaluator, store):
        store.sent.append((1, AlertType.THRESHOLD_80, NOW - timedelta(hours=1)))
        alert = evaluator.evaluate(_budget(), Decimal('12000.00'))
        assert alert.alert_type == AlertType.EXCEEDED

    def test_other_budget_does_not_suppress(self, evaluator, store):
        store.sent.append((2, AlertType.THRESHOLD_80, NOW - timedelta(hours=1)))
        assert evaluator.evaluate(_budget(), Decimal('8500.00')) is not None

    def test_window_start_is_now_minus_window(self, store):
        seen = []

        def has_recent_alert(budget_id, alert_type, since):
            seen.append(since)
            return False

        evaluator = ThresholdEvaluator(
            has_recent_alert, store.save_alert, clock=FixedClock(NOW), dedup_window=timedelta(hours=6),
        )
        evaluator.evaluate(_budget(), Decimal('8500.00'))
        assert seen == [NOW - timedelta(hours=6)]


# ---------------------------------------------------------------------------
# BudgetAlert.mark_as_sent
# ---------------------------------------------------------------------------

class TestMarkAsSent:
    def test_first_call_records_delivery(self):
        alert = BudgetAlert(is_sent=False)
        assert alert.mark_as_sent(NOW) is True
        assert alert.is_sent is True
        assert alert.sent_at == NOW

    def test_second_call_keeps_original_timestamp(self):
        alert = BudgetAlert(is_sent=False)
        alert.mark_as_sent(NOW)
        assert alert.mark_as_sent(NOW + timedelta(hours=3)) is False
        assert alert.sent_at == NOW
