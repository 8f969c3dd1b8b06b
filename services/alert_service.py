"""
Budget Alert Service
====================
Threshold evaluation and alert bookkeeping for budgets.

Thresholds
----------
Utilisation is ``round_half_up(spending * 100 / budget_amount)`` as a
non-negative integer (0 when the budget amount is zero).  Two independent
checks run in a fixed order, each gated by its own toggle on the budget:

  - ``alert_threshold_80``  and 80 <= pct < 100  -> THRESHOLD_80
  - ``alert_threshold_100`` and pct >= 100       -> THRESHOLD_100 (pct == 100)
                                                    or EXCEEDED   (pct > 100)

Deduplication
-------------
Before an alert is created the evaluator asks whether an alert of the same
(budget, type) was *sent* within the dedup window (24h by default).  If so
the new alert is suppressed.  The check is a plain read-then-write with no
uniqueness constraint behind it, so two evaluations of the same budget racing
each other can both insert.

Delivery
--------
Alerts are created unsent.  Delivery happens elsewhere; whoever delivers an
alert calls ``AlertService.mark_alert_sent`` which stamps ``sent_at`` once.
"""
import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from extensions import db
from models.budget_alerts import BudgetAlert
from models.enums import AlertType, BudgetStatus, NotificationChannel
from utils.clock import get_clock
from utils.db_helpers import customer_query, get_or_raise
from utils.exceptions import AlertNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = tuple(c.name for c in (NotificationChannel.SMS, NotificationChannel.EMAIL, NotificationChannel.PUSH))
DEDUP_WINDOW = timedelta(hours=24)

WARNING_PERCENTAGE = AlertType.THRESHOLD_80.threshold_percentage
LIMIT_PERCENTAGE = AlertType.THRESHOLD_100.threshold_percentage


def calculate_percentage(amount, total):
    """Return ``amount`` as a whole percentage of ``total``, rounded half up.

    A zero (or missing) total yields 0 instead of raising.
    """
    if total is None:
        return 0
    total = Decimal(str(total))
    if total == 0:
        return 0
    amount = Decimal('0') if amount is None else Decimal(str(amount))
    percentage = (amount * 100 / total).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return max(int(percentage), 0)


def determine_status(percentage_used):
    """Budget status label for a utilisation percentage."""
    if percentage_used >= LIMIT_PERCENTAGE:
        return BudgetStatus.EXCEEDED.value
    if percentage_used >= WARNING_PERCENTAGE:
        return BudgetStatus.WARNING.value
    return BudgetStatus.ON_TRACK.value


def render_alert_message(alert_type, percentage_used, current_spending, category, budget_amount):
    return (
        f"Budget alert: {alert_type.description} - You've used {percentage_used}% "
        f"({current_spending}) of your {category} budget ({budget_amount})"
    )


class ThresholdEvaluator:
    """Decides whether a budget's current spending warrants a new alert.

    Collaborators are injected so the rule can run against the database
    (see ``AlertService.build_evaluator``) or against in-memory fakes:

      has_recent_alert(budget_id, alert_type, since) -> bool
      save_alert(alert) -> alert
    """

    def __init__(self, has_recent_alert, save_alert, clock=None,
                 dedup_window=DEDUP_WINDOW, channels=DEFAULT_CHANNELS):
        self.has_recent_alert = has_recent_alert
        self.save_alert = save_alert
        self.clock = clock
        self.dedup_window = dedup_window
        self.channels = tuple(channels)

    def candidate_alert_types(self, budget, percentage_used):
        """Alert types the budget qualifies for, before deduplication."""
        candidates = []
        if budget.alert_threshold_80 and WARNING_PERCENTAGE <= percentage_used < LIMIT_PERCENTAGE:
            candidates.append(AlertType.THRESHOLD_80)
        if budget.alert_threshold_100 and percentage_used >= LIMIT_PERCENTAGE:
            if percentage_used > LIMIT_PERCENTAGE:
                candidates.append(AlertType.EXCEEDED)
            else:
                candidates.append(AlertType.THRESHOLD_100)
        return candidates

    def evaluate(self, budget, current_spending):
        """
        Evaluate one budget against its current spending.

        Returns the created (and saved) ``BudgetAlert`` or ``None`` when no
        threshold applies or the alert was suppressed as a duplicate.
        Errors raised by ``save_alert`` propagate to the caller.
        """
        if current_spending is None:
            current_spending = Decimal('0.00')
        percentage_used = calculate_percentage(current_spending, budget.budget_amount)

        created = None
        for alert_type in self.candidate_alert_types(budget, percentage_used):
            alert = self._create_alert_if_not_exists(budget, alert_type, current_spending, percentage_used)
            if created is None:
                created = alert
        return created

    def _now(self):
        return (self.clock or get_clock()).now()

    def _create_alert_if_not_exists(self, budget, alert_type, current_spending, percentage_used):
        since = self._now() - self.dedup_window
        if self.has_recent_alert(budget.id, alert_type, since):
            logger.debug("Alert %s already sent for budget %s", alert_type.name, budget.id)
            return None

        alert = BudgetAlert(
            budget_id=budget.id,
            cif_id=budget.cif_id,
            alert_type=alert_type,
            current_spending=current_spending,
            budget_limit=budget.budget_amount,
            percentage_used=percentage_used,
            category=budget.category,
            alert_message=render_alert_message(
                alert_type, percentage_used, current_spending, budget.category, budget.budget_amount
            ),
            is_sent=False,
            notification_channels=','.join(self.channels),
            created_at=self._now(),
        )
        saved = self.save_alert(alert)
        logger.info("Created %s alert for budget %s", alert_type.name, budget.id)
        return saved


class AlertService:
    """Database-backed collaborators and bookkeeping for budget alerts"""

    @staticmethod
    def has_alert_been_sent(budget_id, alert_type, since):
        """True if an alert of this type for the budget was sent at or after ``since``"""
        return BudgetAlert.query.filter(
            BudgetAlert.budget_id == budget_id,
            BudgetAlert.alert_type == alert_type,
            BudgetAlert.is_sent.is_(True),
            BudgetAlert.sent_at >= since,
        ).first() is not None

    @staticmethod
    def save_alert(alert):
        """Add the alert to the session and flush so it gets an id.

        The caller owns the transaction and decides when to commit.
        """
        db.session.add(alert)
        db.session.flush()
        return alert

    @staticmethod
    def build_evaluator(clock=None):
        """ThresholdEvaluator wired to the database and app config"""
        hours = current_app.config.get('ALERT_DEDUP_WINDOW_HOURS', 24)
        channels = current_app.config.get('ALERT_DEFAULT_CHANNELS') or DEFAULT_CHANNELS
        # Unknown channel names in config fail here with KeyError
        channels = [NotificationChannel[name].name for name in channels]
        return ThresholdEvaluator(
            has_recent_alert=AlertService.has_alert_been_sent,
            save_alert=AlertService.save_alert,
            clock=clock,
            dedup_window=timedelta(hours=hours),
            channels=channels,
        )

    @staticmethod
    def get_alert(alert_id):
        return get_or_raise(BudgetAlert, alert_id, AlertNotFoundError)

    @staticmethod
    def get_unsent_alerts(cif_id=None):
        """Unsent alerts, newest first; all customers when ``cif_id`` is None"""
        query = BudgetAlert.query if cif_id is None else customer_query(BudgetAlert, cif_id)
        return query.filter(BudgetAlert.is_sent.is_(False)) \
            .order_by(BudgetAlert.created_at.desc(), BudgetAlert.id.desc()).all()

    @staticmethod
    def get_alerts_for_customer(cif_id):
        return customer_query(BudgetAlert, cif_id) \
            .order_by(BudgetAlert.created_at.desc(), BudgetAlert.id.desc()).all()

    @staticmethod
    def get_recent_alerts(cif_id, hours=24):
        since = get_clock().now() - timedelta(hours=hours)
        return customer_query(BudgetAlert, cif_id) \
            .filter(BudgetAlert.created_at >= since) \
            .order_by(BudgetAlert.created_at.desc(), BudgetAlert.id.desc()).all()

    @staticmethod
    def get_alerts_for_budget(budget_id, alert_type=None):
        query = BudgetAlert.query.filter(BudgetAlert.budget_id == budget_id)
        if alert_type is not None:
            query = query.filter(BudgetAlert.alert_type == alert_type)
        return query.order_by(BudgetAlert.created_at.desc(), BudgetAlert.id.desc()).all()

    @staticmethod
    def mark_alert_sent(alert_id, commit=True):
        """Mark one alert as delivered (UNSENT -> SENT).  Idempotent."""
        alert = AlertService.get_alert(alert_id)
        if alert.mark_as_sent(get_clock().now()):
            logger.info("Alert %s marked as sent", alert_id)
        if commit:
            db.session.commit()
        return alert

    @staticmethod
    def mark_alerts_sent(alert_ids, commit=True):
        """Mark several alerts as delivered.  Returns how many changed state."""
        if not alert_ids:
            return 0
        now = get_clock().now()
        changed = 0
        for alert in BudgetAlert.query.filter(BudgetAlert.id.in_(alert_ids)).all():
            if alert.mark_as_sent(now):
                changed += 1
        if commit:
            db.session.commit()
        return changed

    @staticmethod
    def delete_old_alerts(days=None, commit=True):
        """Delete alerts created more than ``days`` ago.  Returns the row count."""
        if days is None:
            days = current_app.config.get('ALERT_RETENTION_DAYS', 90)
        cutoff = get_clock().now() - timedelta(days=days)
        deleted = BudgetAlert.query.filter(BudgetAlert.created_at < cutoff) \
            .delete(synchronize_session=False)
        if commit:
            db.session.commit()
        logger.info("Deleted %s alerts created before %s", deleted, cutoff)
        return deleted
