"""
Category Service
Categories come straight from transaction rows; there is no category table.
"""
import logging
from dateutil.relativedelta import relativedelta
from services.budget_service import BudgetService
from services.transaction_service import TransactionService
from utils.clock import get_clock

logger = logging.getLogger(__name__)


class CategoryService:

    @staticmethod
    def get_all_categories():
        """All distinct categories across every customer's transactions"""
        logger.info("Fetching all distinct categories from transactions")
        return TransactionService.get_distinct_categories()

    @staticmethod
    def get_available_categories(cif_id):
        """Categories a customer can budget for (ones used in their transactions)"""
        logger.info("Fetching available categories for customer: %s", cif_id)
        return TransactionService.get_distinct_categories(cif_id)

    @staticmethod
    def get_customer_categories(cif_id, months=12):
        """Spending statistics per category over the last ``months`` months"""
        logger.info("Fetching category statistics for customer: %s", cif_id)
        now = get_clock().now()
        rows = TransactionService.get_category_wise_spending(cif_id, now - relativedelta(months=months), now)
        budget_categories = BudgetService.get_active_budget_categories(cif_id)

        return [
            {
                'category_name': category,
                'transaction_count': count,
                'total_spending': str(total),
                'has_budget': category in budget_categories,
            }
            for category, total, count in rows
        ]
