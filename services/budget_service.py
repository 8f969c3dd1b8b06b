"""
Budget Service
==============
Budget lifecycle, enriched budget views, period summaries and alert checks.

Budgets are never hard-deleted: ``delete_budget`` moves them to the INACTIVE
state.  Only a whitelist of fields can change after creation (amount, end
date, active state, both alert toggles and rollover).

Alert checks
------------
``check_and_trigger_alerts`` (one customer) and ``sweep_alerts`` (every
budget currently in its period) evaluate budgets one at a time.  Each budget
is its own unit of work: its alert is committed on success, and on failure the
session is rolled back, the error is logged and recorded in the result, and
the loop moves on to the next budget.  Both return a dict::

    {'checked': 3, 'alerts_created': 1, 'failed': [{'budget_id': 7, 'error': '...'}]}
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from models.budgets import Budget
from models.enums import BudgetState, BudgetStatus, PeriodType
from services.alert_service import AlertService, calculate_percentage, determine_status
from services.period_service import PeriodService
from services.transaction_service import TransactionService
from extensions import db
from utils.clock import get_clock
from utils.db_helpers import CENTS, customer_query, end_of_day, get_or_raise, start_of_day
from utils.exceptions import BudgetNotFoundError, InvalidBudgetError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'budget_amount',
    'end_date',
    'is_active',
    'alert_threshold_80',
    'alert_threshold_100',
    'rollover_enabled',
)


class BudgetService:

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def create_budget(data):
        """
        Create a budget from validated request data.

        ``data`` keys: cif_id, category, budget_amount, period_type, start_date,
        and optionally end_date, alert_threshold_80, alert_threshold_100,
        rollover_enabled.  A missing end date is derived from the period type.

        Raises InvalidBudgetError when the category has never been used in the
        customer's transactions, the date range is inverted, or an active
        budget for the same category overlaps the period.
        """
        cif_id = data['cif_id']
        category = data['category']
        logger.info("Creating budget for CIF: %s, Category: %s", cif_id, category)

        BudgetService.validate_category_exists(cif_id, category)

        period_type = data['period_type']
        if isinstance(period_type, str):
            period_type = PeriodType[period_type]
        amount = Decimal(str(data['budget_amount']))
        if amount <= 0:
            raise InvalidBudgetError("Budget amount must be greater than 0")
        start_date = data['start_date']
        end_date = data.get('end_date') or PeriodService.calculate_end_date(start_date, period_type)
        if end_date < start_date:
            raise InvalidBudgetError("End date must be on or after start date")

        overlapping = BudgetService.find_overlapping_budgets(cif_id, category, start_date, end_date)
        if overlapping:
            raise InvalidBudgetError(
                f"A budget already exists for category '{category}' "
                f"in the period {start_date} to {end_date}"
            )

        budget = Budget(
            cif_id=cif_id,
            category=category,
            budget_amount=amount.quantize(CENTS, rounding=ROUND_HALF_UP),
            period_type=period_type,
            start_date=start_date,
            end_date=end_date,
            state=BudgetState.ACTIVE,
            alert_threshold_80=data.get('alert_threshold_80', True),
            alert_threshold_100=data.get('alert_threshold_100', True),
            rollover_enabled=data.get('rollover_enabled', False),
        )
        db.session.add(budget)
        db.session.commit()
        logger.info("Budget created with ID: %s", budget.id)

        return BudgetService.build_budget_response(budget)

    @staticmethod
    def update_budget(budget_id, data):
        """Apply the whitelisted fields present in ``data``; other keys are ignored"""
        logger.info("Updating budget ID: %s", budget_id)
        budget = BudgetService.get_budget_or_raise(budget_id)

        changes = {key: data[key] for key in UPDATABLE_FIELDS if data.get(key) is not None}

        if 'budget_amount' in changes:
            amount = Decimal(str(changes['budget_amount']))
            if amount <= 0:
                raise InvalidBudgetError("Budget amount must be greater than 0")
            budget.budget_amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        if 'end_date' in changes:
            if changes['end_date'] < budget.start_date:
                raise InvalidBudgetError("End date must be on or after start date")
            budget.end_date = changes['end_date']
        if 'is_active' in changes:
            if changes['is_active']:
                budget.activate()
            else:
                budget.deactivate()
        for flag in ('alert_threshold_80', 'alert_threshold_100', 'rollover_enabled'):
            if flag in changes:
                setattr(budget, flag, bool(changes[flag]))

        db.session.commit()
        logger.info("Budget updated: %s", budget.id)
        return BudgetService.build_budget_response(budget)

    @staticmethod
    def delete_budget(budget_id):
        """Soft delete: the budget moves to INACTIVE and stays in the table"""
        logger.info("Deleting budget ID: %s", budget_id)
        budget = BudgetService.get_budget_or_raise(budget_id)
        budget.deactivate()
        db.session.commit()
        logger.info("Budget soft-deleted: %s", budget_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def get_budget_or_raise(budget_id):
        return get_or_raise(Budget, budget_id, BudgetNotFoundError)

    @staticmethod
    def get_budget(budget_id):
        logger.debug("Fetching budget ID: %s", budget_id)
        return BudgetService.build_budget_response(BudgetService.get_budget_or_raise(budget_id))

    @staticmethod
    def active_budgets_query(cif_id):
        return customer_query(Budget, cif_id).filter(Budget.state == BudgetState.ACTIVE)

    @staticmethod
    def get_active_budgets(cif_id):
        logger.debug("Fetching active budgets for CIF: %s", cif_id)
        budgets = BudgetService.active_budgets_query(cif_id).order_by(Budget.category).all()
        return [BudgetService.build_budget_response(b) for b in budgets]

    @staticmethod
    def get_active_budget_categories(cif_id):
        rows = BudgetService.active_budgets_query(cif_id) \
            .with_entities(Budget.category).distinct().all()
        return {category for (category,) in rows}

    @staticmethod
    def find_overlapping_budgets(cif_id, category, start_date, end_date):
        """Active budgets for the same category whose date range intersects [start, end]"""
        return BudgetService.active_budgets_query(cif_id).filter(
            Budget.category == category,
            Budget.start_date <= end_date,
            Budget.end_date >= start_date,
        ).all()

    @staticmethod
    def find_budgets_requiring_alert_check(today):
        """Active budgets in their period with at least one alert toggle on"""
        return Budget.query.filter(
            Budget.state == BudgetState.ACTIVE,
            Budget.start_date <= today,
            Budget.end_date >= today,
            db.or_(Budget.alert_threshold_80.is_(True), Budget.alert_threshold_100.is_(True)),
        ).order_by(Budget.id).all()

    @staticmethod
    def validate_category_exists(cif_id, category):
        available = TransactionService.get_distinct_categories(cif_id)
        if category not in available:
            raise InvalidBudgetError(
                f"Category '{category}' not found in your transactions. "
                f"Available categories: {', '.join(available)}"
            )

    # ------------------------------------------------------------------
    # Enrichment and summaries
    # ------------------------------------------------------------------

    @staticmethod
    def current_spending(budget):
        """Spending against a budget across its own date range"""
        return TransactionService.calculate_category_spending(
            budget.cif_id,
            budget.category,
            start_of_day(budget.start_date),
            end_of_day(budget.end_date),
        )

    @staticmethod
    def build_budget_response(budget):
        """Budget fields plus spending, remaining amount, utilisation and days left"""
        spending = BudgetService.current_spending(budget)
        amount = Decimal(str(budget.budget_amount))
        percentage_used = calculate_percentage(spending, amount)

        response = budget.to_dict()
        response.update({
            'current_spending': str(spending),
            'remaining_budget': str(amount - spending),
            'percentage_used': percentage_used,
            'status': determine_status(percentage_used),
            'days_remaining': PeriodService.days_remaining(budget.end_date, get_clock().today()),
        })
        return response

    @staticmethod
    def build_category_summary(budget, start_datetime, end_datetime):
        spending = TransactionService.calculate_category_spending(
            budget.cif_id, budget.category, start_datetime, end_datetime
        )
        amount = Decimal(str(budget.budget_amount))
        percentage_used = calculate_percentage(spending, amount)
        return {
            'category': budget.category,
            'budget_amount': amount,
            'spending': spending,
            'remaining': amount - spending,
            'percentage_used': percentage_used,
            'status': determine_status(percentage_used),
        }

    @staticmethod
    def get_budget_summary(cif_id, start_date, end_date):
        """
        Summarise budgets active on ``start_date`` against spending in the window.

        Returns a dict with income/expense/budget totals, utilisation, a
        per-category breakdown and human-readable insights.
        """
        logger.info("Generating budget summary for CIF: %s from %s to %s", cif_id, start_date, end_date)
        start_datetime = start_of_day(start_date)
        end_datetime = end_of_day(end_date)

        budgets = BudgetService.active_budgets_query(cif_id).filter(
            Budget.start_date <= start_date,
            Budget.end_date >= start_date,
        ).order_by(Budget.category).all()

        total_income = TransactionService.calculate_total_income(cif_id, start_datetime, end_datetime)
        total_expenses = TransactionService.calculate_total_expenses(cif_id, start_datetime, end_datetime)

        breakdown = [
            BudgetService.build_category_summary(budget, start_datetime, end_datetime)
            for budget in budgets
        ]
        total_budget = sum((row['budget_amount'] for row in breakdown), Decimal('0.00'))
        total_spending = sum((row['spending'] for row in breakdown), Decimal('0.00'))

        insights = BudgetService.generate_budget_insights(breakdown, total_income, total_expenses)

        return {
            'cif_id': cif_id,
            'period_start': start_date.isoformat(),
            'period_end': end_date.isoformat(),
            'total_income': str(total_income),
            'total_expenses': str(total_expenses),
            'total_budget': str(total_budget),
            'total_spending': str(total_spending),
            'remaining_budget': str(total_budget - total_spending),
            'budget_utilization_percentage': calculate_percentage(total_spending, total_budget),
            'category_breakdown': [
                {key: (str(value) if isinstance(value, Decimal) else value) for key, value in row.items()}
                for row in breakdown
            ],
            'insights': insights,
        }

    @staticmethod
    def generate_budget_insights(breakdown, total_income, total_expenses):
        insights = []

        over_budget = [row['category'] for row in breakdown if row['status'] == BudgetStatus.EXCEEDED.value]
        if over_budget:
            insights.append(f"⚠️ Over budget in: {', '.join(over_budget)}")

        near_limit = [row['category'] for row in breakdown if row['status'] == BudgetStatus.WARNING.value]
        if near_limit:
            insights.append(f"⚡ Approaching limit in: {', '.join(near_limit)}")

        if total_income > 0:
            savings_rate = ((total_income - total_expenses) / total_income) \
                .quantize(CENTS, rounding=ROUND_HALF_UP) * 100
            insights.append(f"💰 Savings rate: {savings_rate:.1f}%")

        return insights

    # ------------------------------------------------------------------
    # Alert checks
    # ------------------------------------------------------------------

    @staticmethod
    def evaluate_budget(budget, evaluator=None):
        """Evaluate one budget; returns the created alert or None.  Does not commit."""
        if evaluator is None:
            evaluator = AlertService.build_evaluator()
        return evaluator.evaluate(budget, BudgetService.current_spending(budget))

    @staticmethod
    def _run_alert_checks(budget_ids):
        evaluator = AlertService.build_evaluator()
        result = {'checked': 0, 'alerts_created': 0, 'failed': []}

        for budget_id in budget_ids:
            try:
                budget = BudgetService.get_budget_or_raise(budget_id)
                alert = BudgetService.evaluate_budget(budget, evaluator)
                db.session.commit()
            except Exception as exc:
                db.session.rollback()
                logger.exception("Alert check failed for budget %s", budget_id)
                result['failed'].append({'budget_id': budget_id, 'error': str(exc)})
                continue

            result['checked'] += 1
            if alert is not None:
                result['alerts_created'] += 1

        return result

    @staticmethod
    def check_and_trigger_alerts(cif_id):
        """Evaluate every active budget of one customer"""
        logger.info("Checking budget alerts for CIF: %s", cif_id)
        budget_ids = [
            budget_id for (budget_id,) in
            BudgetService.active_budgets_query(cif_id).with_entities(Budget.id).order_by(Budget.id).all()
        ]
        result = BudgetService._run_alert_checks(budget_ids)
        logger.info("Alert check completed for CIF: %s (%s)", cif_id, result)
        return result

    @staticmethod
    def sweep_alerts(today=None):
        """Evaluate every budget that is active and inside its period today"""
        if today is None:
            today = get_clock().today()
        budget_ids = [b.id for b in BudgetService.find_budgets_requiring_alert_check(today)]
        logger.info("Sweeping %s budgets for alerts", len(budget_ids))
        result = BudgetService._run_alert_checks(budget_ids)
        logger.info("Alert sweep completed: %s", result)
        return result
