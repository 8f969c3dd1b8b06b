from flask import Blueprint

transactions_bp = Blueprint('transactions', __name__, url_prefix='/api/v1/transactions')

from . import routes
