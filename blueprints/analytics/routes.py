from flask import current_app
from . import analytics_bp
from services.analytics_service import AnalyticsService
from utils.db_helpers import end_of_day, start_of_day
from utils.forms import DateRangeForm, MonthsForm
from utils.responses import api_success


@analytics_bp.route('/customer/<cif_id>/spending', methods=['GET'])
def spending(cif_id):
    """Spending analytics for a date range"""
    form = DateRangeForm.from_args().validate_or_raise()
    current_app.logger.info(f'GET /api/v1/analytics/customer/{cif_id}/spending')
    data = AnalyticsService.get_spending_analytics(cif_id, form.start_date.data, form.end_date.data)
    return api_success(data)


@analytics_bp.route('/customer/<cif_id>/category-breakdown', methods=['GET'])
def category_breakdown(cif_id):
    form = DateRangeForm.from_args().validate_or_raise()
    data = AnalyticsService.get_category_breakdown(
        cif_id, start_of_day(form.start_date.data), end_of_day(form.end_date.data)
    )
    return api_success(data)


@analytics_bp.route('/customer/<cif_id>/monthly-trend', methods=['GET'])
def monthly_trend(cif_id):
    form = MonthsForm.from_args().validate_or_raise()
    return api_success(AnalyticsService.get_monthly_trend(cif_id, form.months.data))


@analytics_bp.route('/customer/<cif_id>/insights', methods=['GET'])
def insights(cif_id):
    """Rule-based insights for the last month"""
    current_app.logger.info(f'GET /api/v1/analytics/customer/{cif_id}/insights')
    return api_success(AnalyticsService.generate_insights(cif_id))
