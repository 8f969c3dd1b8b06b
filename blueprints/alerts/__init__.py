"""
Alerts blueprint: delivery-side access to budget alerts
"""
from flask import Blueprint

alerts_bp = Blueprint('alerts', __name__, url_prefix='/api/v1/alerts')

from . import routes
