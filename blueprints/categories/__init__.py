"""
Categories blueprint: categories derived from transaction rows
"""
from flask import Blueprint

bp = Blueprint('categories', __name__, url_prefix='/api/v1/categories')

from blueprints.categories import routes
