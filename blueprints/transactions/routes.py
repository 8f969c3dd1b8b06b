from flask import current_app, request
from . import transactions_bp
from .forms import RecategorizeForm, TransactionFilterForm
from services.transaction_service import TransactionService
from utils.db_helpers import end_of_day, start_of_day
from utils.forms import DateTimeRangeForm, MonthsForm, PageForm
from utils.responses import api_success, page_to_dict


def _serialize(transaction):
    return transaction.to_dict()


@transactions_bp.route('/customer/<cif_id>', methods=['GET'])
def customer_transactions(cif_id):
    """Paginated transactions for a customer, newest first"""
    form = PageForm.from_args().validate_or_raise()
    current_app.logger.info(
        f'GET /api/v1/transactions/customer/{cif_id} - page: {form.page.data}, size: {form.size.data}'
    )
    pagination = TransactionService.get_transactions_by_customer(cif_id, form.page.data, form.size.data)
    return api_success(page_to_dict(pagination, _serialize))


@transactions_bp.route('/filter', methods=['POST'])
def filter_transactions():
    form = TransactionFilterForm.from_json().validate_or_raise()
    current_app.logger.info(
        f'POST /api/v1/transactions/filter - CIF: {form.cif_id.data}, Category: {form.category.data}'
    )
    pagination = TransactionService.get_transactions_with_filter(
        form.cif_id.data,
        start_of_day(form.start_date.data),
        end_of_day(form.end_date.data),
        category=form.category.data or None,
        page=form.page.data,
        size=form.size.data,
        sort_by=form.sort_by.data,
        sort_direction=form.sort_direction.data,
    )
    return api_success(page_to_dict(pagination, _serialize))


@transactions_bp.route('/customer/<cif_id>/uncategorized', methods=['GET'])
def uncategorized(cif_id):
    form = MonthsForm.from_args().validate_or_raise()
    transactions = TransactionService.get_uncategorized_transactions(cif_id, form.months.data)
    return api_success([_serialize(t) for t in transactions])


@transactions_bp.route('/customer/<cif_id>/category/<category>/spending', methods=['GET'])
def category_spending(cif_id, category):
    """Total DEBIT spending for one category between two instants"""
    form = DateTimeRangeForm.from_args().validate_or_raise()
    start, end = form.instant_range()
    spending = TransactionService.calculate_category_spending(cif_id, category, start, end)
    return api_success(spending)


@transactions_bp.route('/<int:transaction_id>/category', methods=['PATCH'])
def recategorize(transaction_id):
    # category may arrive as a query parameter or in a JSON body
    if 'category' in request.args:
        form = RecategorizeForm.from_args()
    else:
        form = RecategorizeForm.from_json()
    form.validate_or_raise()
    current_app.logger.info(
        f'PATCH /api/v1/transactions/{transaction_id}/category - New: {form.category.data}'
    )
    transaction = TransactionService.recategorize_transaction(transaction_id, form.category.data)
    return api_success(_serialize(transaction), 'Transaction re-categorized successfully')


@transactions_bp.route('/<int:transaction_id>', methods=['GET'])
def detail(transaction_id):
    return api_success(_serialize(TransactionService.get_transaction(transaction_id)))
