from flask import current_app
from blueprints.categories import bp
from services.category_service import CategoryService
from utils.responses import api_success


@bp.route('', methods=['GET'])
def index():
    """All distinct categories"""
    current_app.logger.info('GET /api/v1/categories')
    return api_success(CategoryService.get_all_categories())


@bp.route('/customer/<cif_id>', methods=['GET'])
def customer_categories(cif_id):
    """Per-category spending statistics for the last 12 months"""
    current_app.logger.info(f'GET /api/v1/categories/customer/{cif_id}')
    return api_success(CategoryService.get_customer_categories(cif_id))


@bp.route('/customer/<cif_id>/available', methods=['GET'])
def available(cif_id):
    return api_success(CategoryService.get_available_categories(cif_id))
