"""
JSON envelope helpers.

Every API response has the shape::

    {"success": true, "message": "...", "data": ..., "timestamp": "..."}

Errors add ``status``, ``path`` and, for validation failures, ``errors``.
"""
from flask import jsonify, request

from utils.clock import get_clock


def _timestamp():
    return get_clock().now().isoformat() + 'Z'


def api_success(data=None, message=None, status=200):
    body = {
        'success': True,
        'message': message,
        'data': data,
        'timestamp': _timestamp(),
    }
    return jsonify(body), status


def api_error(message, status, errors=None):
    body = {
        'success': False,
        'message': message,
        'status': status,
        'path': request.path,
        'timestamp': _timestamp(),
    }
    if errors:
        body['errors'] = errors
    return jsonify(body), status


def page_to_dict(pagination, serializer):
    """Serialize a Flask-SQLAlchemy ``Pagination`` with a 0-based page index."""
    return {
        'content': [serializer(item) for item in pagination.items],
        'page': pagination.page - 1,
        'size': pagination.per_page,
        'total_elements': pagination.total,
        'total_pages': pagination.pages,
    }
