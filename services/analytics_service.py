"""
Analytics Service
Spending analytics and rule-based insights over a customer's transactions.

Amounts are returned as ``Decimal``; Flask's JSON provider renders them as
strings.
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from dateutil.relativedelta import relativedelta
from flask import current_app
from services.transaction_service import TransactionService
from utils.clock import get_clock
from utils.db_helpers import CENTS, end_of_day, start_of_day

logger = logging.getLogger(__name__)


class AnalyticsService:

    @staticmethod
    def get_spending_analytics(cif_id, start_date, end_date):
        """Totals, daily average, breakdown, trend, merchants and insights for a date range"""
        logger.info("Generating spending analytics for CIF: %s from %s to %s", cif_id, start_date, end_date)
        start_datetime = start_of_day(start_date)
        end_datetime = end_of_day(end_date)

        total_spending = TransactionService.calculate_total_expenses(cif_id, start_datetime, end_datetime)

        days = (end_date - start_date).days + 1
        average_daily = (total_spending / days).quantize(CENTS, rounding=ROUND_HALF_UP)

        breakdown = AnalyticsService.get_category_breakdown(cif_id, start_datetime, end_datetime)
        top = breakdown[0] if breakdown else None

        monthly_trend = AnalyticsService.get_monthly_trend(cif_id, 6)
        top_merchants = TransactionService.get_top_merchants(cif_id, start_datetime, end_datetime, 5)

        return {
            'cif_id': cif_id,
            'start_date': start_date.isoformat(),
            'end_date': end_date.isoformat(),
            'total_spending': total_spending,
            'average_daily_spending': average_daily,
            'top_category': top['category'] if top else None,
            'top_category_amount': top['total_amount'] if top else Decimal('0.00'),
            'category_breakdown': breakdown,
            'monthly_trend': monthly_trend,
            'top_merchants': top_merchants,
            'insights': AnalyticsService._generate_spending_insights(total_spending, breakdown, monthly_trend),
        }

    @staticmethod
    def get_category_breakdown(cif_id, start_datetime, end_datetime):
        logger.debug("Getting category breakdown for CIF: %s", cif_id)
        return [
            {'category': category, 'total_amount': total, 'transaction_count': count}
            for category, total, count in
            TransactionService.get_category_wise_spending(cif_id, start_datetime, end_datetime)
        ]

    @staticmethod
    def get_monthly_trend(cif_id, months=6):
        """
        Income and expenses per calendar month, newest month first.

        Only months with at least one transaction appear.
        """
        logger.debug("Getting monthly trend for CIF: %s (last %s months)", cif_id, months)
        since = get_clock().now() - relativedelta(months=months)

        buckets = {}
        for txn in TransactionService.get_transactions_since(cif_id, since):
            if txn.transaction_date is None:
                continue
            key = (txn.transaction_date.year, txn.transaction_date.month)
            bucket = buckets.setdefault(key, {'income': Decimal('0.00'), 'expenses': Decimal('0.00')})
            if txn.part_transaction_type == txn.CREDIT:
                bucket['income'] += Decimal(str(txn.transaction_amount or 0))
            elif txn.part_transaction_type == txn.DEBIT:
                bucket['expenses'] += txn.absolute_amount

        return [
            {
                'month': date(year, month, 1).isoformat(),
                'income': totals['income'].quantize(CENTS),
                'expenses': totals['expenses'].quantize(CENTS),
            }
            for (year, month), totals in sorted(buckets.items(), reverse=True)
        ]

    @staticmethod
    def generate_insights(cif_id):
        """Insights for the last month of activity"""
        logger.info("Generating insights for CIF: %s", cif_id)
        now = get_clock().now()
        one_month_ago = now - relativedelta(months=1)

        total_spending = TransactionService.calculate_total_expenses(cif_id, one_month_ago, now)
        categories = AnalyticsService.get_category_breakdown(cif_id, one_month_ago, now)
        trend = AnalyticsService.get_monthly_trend(cif_id, 3)

        return AnalyticsService._generate_spending_insights(total_spending, categories, trend)

    @staticmethod
    def _generate_spending_insights(total_spending, categories, monthly_trend):
        currency = current_app.config.get('CURRENCY', 'KES')
        insights = []

        # Highest spending category
        if categories and total_spending > 0:
            top = categories[0]
            share = (top['total_amount'] / total_spending).quantize(CENTS, rounding=ROUND_HALF_UP) * 100
            insights.append(AnalyticsService._insight(
                'SPEND_PATTERN',
                f"Your highest spending category is {top['category']} ({share:.1f}% of total spending)",
                'HIGH',
                recommendation='Consider setting a budget for this category',
            ))

        # Month-over-month change
        if len(monthly_trend) >= 2:
            change = monthly_trend[0]['expenses'] - monthly_trend[1]['expenses']
            if change > 0:
                insights.append(AnalyticsService._insight(
                    'SPEND_PATTERN',
                    f"Your spending increased by {currency} {change:.2f} compared to last month",
                    'MEDIUM',
                    recommendation='Review your recent purchases to identify any unusual spending',
                ))
            elif change < 0:
                insights.append(AnalyticsService._insight(
                    'SAVINGS_TIP',
                    f"Great job! You saved {currency} {abs(change):.2f} compared to last month",
                    'LOW',
                ))

        if len(categories) > 3:
            insights.append(AnalyticsService._insight(
                'BUDGET_RECOMMENDATION',
                "You're spending across multiple categories",
                'MEDIUM',
                recommendation='Consider creating budgets for your top 3 spending categories',
            ))

        return insights

    @staticmethod
    def _insight(insight_type, message, priority, recommendation=None, potential_savings=None):
        return {
            'type': insight_type,
            'message': message,
            'recommendation': recommendation,
            'potential_savings': potential_savings,
            'priority': priority,
        }
