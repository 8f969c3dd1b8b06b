"""
Transaction Service
Read access, spending aggregates and re-categorisation for customer transactions
"""
import logging
from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from models.transactions import Transaction
from extensions import db
from utils.clock import get_clock
from utils.db_helpers import customer_query, get_or_raise, to_money
from utils.exceptions import TransactionNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for transaction queries and spending aggregates"""

    SORT_FIELDS = {
        'transaction_date': Transaction.transaction_date,
        'amount': Transaction.transaction_amount,
        'merchant': Transaction.merchant,
        'category': Transaction.category,
    }

    @staticmethod
    def _paginate(query, page, size):
        # API pages are 0-based; Flask-SQLAlchemy pages start at 1
        return query.paginate(page=page + 1, per_page=size, error_out=False)

    @staticmethod
    def get_transactions_by_customer(cif_id, page=0, size=20):
        """Paginated transactions for a customer, newest first"""
        logger.debug("Fetching transactions for CIF: %s, page: %s, size: %s", cif_id, page, size)
        query = customer_query(Transaction, cif_id).order_by(
            Transaction.transaction_date.desc(), Transaction.id.desc()
        )
        return TransactionService._paginate(query, page, size)

    @staticmethod
    def get_transactions_with_filter(cif_id, start_datetime, end_datetime, category=None,
                                     page=0, size=20, sort_by='transaction_date',
                                     sort_direction='DESC'):
        """
        Filtered, sorted, paginated transactions.

        When ``category`` is given only DEBIT (expense) rows of that category
        are returned; otherwise every transaction in the date range is.
        """
        logger.debug("Fetching filtered transactions for CIF: %s", cif_id)

        column = TransactionService.SORT_FIELDS.get(sort_by)
        if column is None:
            raise ValidationFailedError([{
                'field': 'sort_by',
                'message': f"Sort field must be one of: {', '.join(sorted(TransactionService.SORT_FIELDS))}",
                'rejected_value': sort_by,
            }])
        direction = (sort_direction or 'DESC').upper()
        if direction not in ('ASC', 'DESC'):
            raise ValidationFailedError([{
                'field': 'sort_direction',
                'message': 'Sort direction must be ASC or DESC',
                'rejected_value': sort_direction,
            }])

        query = customer_query(Transaction, cif_id).filter(
            Transaction.transaction_date.between(start_datetime, end_datetime)
        )
        if category:
            query = query.filter(
                Transaction.category == category,
                Transaction.part_transaction_type == Transaction.DEBIT,
            )

        order = column.asc() if direction == 'ASC' else column.desc()
        query = query.order_by(order, Transaction.id.desc())
        return TransactionService._paginate(query, page, size)

    @staticmethod
    def get_uncategorized_transactions(cif_id, months=6):
        """Transactions with no category from the last ``months`` months, newest first"""
        logger.debug("Fetching uncategorized transactions for CIF: %s", cif_id)
        from_date = get_clock().now() - relativedelta(months=months)
        return customer_query(Transaction, cif_id).filter(
            db.or_(Transaction.category.is_(None), Transaction.category == ''),
            Transaction.transaction_date >= from_date,
        ).order_by(Transaction.transaction_date.desc()).all()

    @staticmethod
    def calculate_category_spending(cif_id, category, start_datetime, end_datetime):
        """Sum of absolute DEBIT amounts for one category; zero when nothing matches"""
        logger.debug("Calculating spending for CIF: %s, category: %s", cif_id, category)
        total = db.session.query(
            func.coalesce(func.sum(func.abs(Transaction.transaction_amount)), 0)
        ).filter(
            Transaction.cif_id == cif_id,
            Transaction.category == category,
            Transaction.part_transaction_type == Transaction.DEBIT,
            Transaction.transaction_date.between(start_datetime, end_datetime),
        ).scalar()
        return to_money(total)

    @staticmethod
    def calculate_total_expenses(cif_id, start_datetime, end_datetime):
        total = db.session.query(
            func.coalesce(func.sum(func.abs(Transaction.transaction_amount)), 0)
        ).filter(
            Transaction.cif_id == cif_id,
            Transaction.part_transaction_type == Transaction.DEBIT,
            Transaction.transaction_date.between(start_datetime, end_datetime),
        ).scalar()
        return to_money(total)

    @staticmethod
    def calculate_total_income(cif_id, start_datetime, end_datetime):
        total = db.session.query(
            func.coalesce(func.sum(Transaction.transaction_amount), 0)
        ).filter(
            Transaction.cif_id == cif_id,
            Transaction.part_transaction_type == Transaction.CREDIT,
            Transaction.transaction_date.between(start_datetime, end_datetime),
        ).scalar()
        return to_money(total)

    @staticmethod
    def get_category_wise_spending(cif_id, start_datetime, end_datetime):
        """
        DEBIT spending per category, largest first.

        Returns:
            List of tuples: (category, total_amount, transaction_count)
        """
        total = func.sum(func.abs(Transaction.transaction_amount))
        rows = db.session.query(
            Transaction.category,
            func.coalesce(total, 0),
            func.count(Transaction.id),
        ).filter(
            Transaction.cif_id == cif_id,
            Transaction.part_transaction_type == Transaction.DEBIT,
            Transaction.transaction_date.between(start_datetime, end_datetime),
        ).group_by(Transaction.category).order_by(total.desc()).all()
        return [(category, to_money(amount), count) for category, amount, count in rows]

    @staticmethod
    def get_top_merchants(cif_id, start_datetime, end_datetime, limit=5):
        total = func.sum(func.abs(Transaction.transaction_amount))
        rows = db.session.query(Transaction.merchant).filter(
            Transaction.cif_id == cif_id,
            Transaction.part_transaction_type == Transaction.DEBIT,
            Transaction.merchant.isnot(None),
            Transaction.transaction_date.between(start_datetime, end_datetime),
        ).group_by(Transaction.merchant).order_by(total.desc()).limit(limit).all()
        return [merchant for (merchant,) in rows]

    @staticmethod
    def get_distinct_categories(cif_id=None):
        """Distinct non-empty categories, for one customer or across all customers"""
        query = db.session.query(Transaction.category).filter(
            Transaction.category.isnot(None),
            Transaction.category != '',
        )
        if cif_id is not None:
            query = query.filter(Transaction.cif_id == cif_id)
        return [category for (category,) in query.distinct().order_by(Transaction.category).all()]

    @staticmethod
    def get_transactions_since(cif_id, since):
        return customer_query(Transaction, cif_id).filter(
            Transaction.transaction_date >= since
        ).all()

    @staticmethod
    def recategorize_transaction(transaction_id, new_category):
        """Assign a category by hand; manual categorisation has full confidence"""
        logger.info("Re-categorizing transaction %s: %s", transaction_id, new_category)
        transaction = get_or_raise(Transaction, transaction_id, TransactionNotFoundError)
        transaction.category = new_category
        transaction.confidence = 1.0
        db.session.commit()
        return transaction

    @staticmethod
    def get_transaction(transaction_id):
        logger.debug("Fetching transaction ID: %s", transaction_id)
        return get_or_raise(Transaction, transaction_id, TransactionNotFoundError)
