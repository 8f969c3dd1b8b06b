from flask import Blueprint

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/v1/analytics')

from . import routes
