from flask import current_app, request
from . import budgets_bp
from .forms import BudgetCreateForm, BudgetUpdateForm
from extensions import limiter
from services.alert_service import AlertService
from services.budget_service import BudgetService
from utils.forms import DateRangeForm
from utils.responses import api_success
from utils.exceptions import ValidationFailedError


@budgets_bp.route('', methods=['POST'])
def create():
    """Create a new budget"""
    current_app.logger.info('POST /api/v1/budgets')
    form = BudgetCreateForm.from_json().validate_or_raise()
    budget = BudgetService.create_budget(form.cleaned_data())
    return api_success(budget, 'Budget created successfully', 201)


@budgets_bp.route('/<int:budget_id>', methods=['PUT'])
def update(budget_id):
    """Update the whitelisted fields of a budget"""
    current_app.logger.info(f'PUT /api/v1/budgets/{budget_id}')
    form = BudgetUpdateForm.from_json().validate_or_raise()
    budget = BudgetService.update_budget(budget_id, form.cleaned_data())
    return api_success(budget, 'Budget updated successfully')


@budgets_bp.route('/<int:budget_id>', methods=['GET'])
def detail(budget_id):
    return api_success(BudgetService.get_budget(budget_id))


@budgets_bp.route('/<int:budget_id>', methods=['DELETE'])
def delete(budget_id):
    """Soft delete a budget"""
    current_app.logger.info(f'DELETE /api/v1/budgets/{budget_id}')
    BudgetService.delete_budget(budget_id)
    return api_success(None, 'Budget deleted successfully')


@budgets_bp.route('/customer/<cif_id>', methods=['GET'])
def customer_budgets(cif_id):
    """Active budgets for a customer"""
    return api_success(BudgetService.get_active_budgets(cif_id))


@budgets_bp.route('/customer/<cif_id>/summary', methods=['GET'])
def summary(cif_id):
    """Budget summary for a date range"""
    form = DateRangeForm.from_args().validate_or_raise()
    data = BudgetService.get_budget_summary(cif_id, form.start_date.data, form.end_date.data)
    return api_success(data)


@budgets_bp.route('/customer/<cif_id>/check-alerts', methods=['POST'])
@limiter.limit('10 per minute')
def check_alerts(cif_id):
    """Evaluate every active budget of a customer and create due alerts"""
    current_app.logger.info(f'POST /api/v1/budgets/customer/{cif_id}/check-alerts')
    result = BudgetService.check_and_trigger_alerts(cif_id)
    return api_success(result, 'Alert check completed')


@budgets_bp.route('/customer/<cif_id>/alerts', methods=['GET'])
def customer_alerts(cif_id):
    """Alerts created for a customer in the last ``hours`` hours (default 24)"""
    hours = request.args.get('hours', 24, type=int)
    if hours is None or hours < 1:
        raise ValidationFailedError([{
            'field': 'hours',
            'message': 'Hours must be a positive integer',
            'rejected_value': request.args.get('hours'),
        }])
    alerts = AlertService.get_recent_alerts(cif_id, hours)
    return api_success([alert.to_dict() for alert in alerts])
