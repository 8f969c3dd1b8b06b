"""
Database query helpers for customer-scoped data.

Budgets, alerts and transactions all belong to a customer identified by a
``cif_id``.  Queries that list or aggregate data go through these helpers so
that one customer's records never leak into another customer's results.

Usage
-----
In any blueprint route or service function::

    from utils.db_helpers import customer_query, get_or_raise

    budgets = customer_query(Budget, cif_id).order_by(Budget.category).all()
    budget = get_or_raise(Budget, budget_id, BudgetNotFoundError)
"""
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP

from extensions import db


CENTS = Decimal('0.01')


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------

def customer_query(model, cif_id):
    """Return a query pre-filtered to *cif_id*.

    Examples::

        customer_query(Budget, 'CIF001').all()
        customer_query(Transaction, 'CIF001').filter_by(category='Food').count()
    """
    if not hasattr(model, 'cif_id'):
        raise AttributeError(
            f"customer_query() called on {model.__name__} but it has no cif_id column."
        )
    if not cif_id:
        # Return a query that always yields zero rows rather than leaking data
        return model.query.filter(model.id == -1)
    return model.query.filter(model.cif_id == cif_id)


def get_or_raise(model, record_id, error_cls):
    """Fetch a record by primary key or raise *error_cls*."""
    record = db.session.get(model, record_id)
    if record is None:
        label = model.__name__
        raise error_cls(f"{label} not found with ID: {record_id}")
    return record


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

def to_money(value):
    """Coerce an aggregate result into a cent-precision ``Decimal``.

    ``None`` (no matching rows) becomes ``Decimal('0.00')``.
    """
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def start_of_day(day):
    return datetime.combine(day, time.min)


def end_of_day(day):
    """Last instant of *day* as stored (23:59:59)."""
    return datetime.combine(day, time(23, 59, 59))
