"""
Shared pytest fixtures for the budget tracking test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.

Time-dependent tests use the ``clock`` fixture, which installs a FixedClock
at 2024-06-15 12:00 UTC as the app's CLOCK.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest
from app import create_app
from extensions import db as _db
from utils.clock import FixedClock

CIF = 'CIF001'
OTHER_CIF = 'CIF002'
NOW = datetime(2024, 6, 15, 12, 0, 0)


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()
    app.config['CLOCK'] = None


@pytest.fixture
def clock(app):
    """Freeze service time at NOW."""
    fixed = FixedClock(NOW)
    app.config['CLOCK'] = fixed
    return fixed


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def add_transaction(app):
    """Factory inserting a committed transaction.

    Debits are stored negative, as the core-banking feed does.
    """
    from models.transactions import Transaction

    def _add(amount, category='Food, drinks', when=datetime(2024, 6, 10, 9, 30),
             cif_id=CIF, kind='DEBIT', merchant='Naivas Supermarket'):
        amount = Decimal(str(amount))
        txn = Transaction(
            cif_id=cif_id,
            transaction_date=when,
            posted_date=when,
            part_transaction_type=kind,
            transaction_amount=-amount if kind == Transaction.DEBIT else amount,
            merchant=merchant,
            category=category,
            confidence=0.9,
        )
        _db.session.add(txn)
        _db.session.commit()
        return txn

    return _add


@pytest.fixture
def make_budget(app):
    """Factory inserting a committed budget without going through the service."""
    from models.budgets import Budget
    from models.enums import BudgetState, PeriodType

    def _make(amount='10000.00', category='Food, drinks', cif_id=CIF,
              start=date(2024, 6, 1), end=date(2024, 6, 30), **overrides):
        fields = dict(
            cif_id=cif_id,
            category=category,
            budget_amount=Decimal(amount),
            period_type=PeriodType.MONTHLY,
            start_date=start,
            end_date=end,
            state=BudgetState.ACTIVE,
            alert_threshold_80=True,
            alert_threshold_100=True,
            rollover_enabled=False,
        )
        fields.update(overrides)
        budget = Budget(**fields)
        _db.session.add(budget)
        _db.session.commit()
        return budget

    return _make
