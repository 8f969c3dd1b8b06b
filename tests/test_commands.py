"""
Tests for the ``flask alerts`` CLI group.
"""
from datetime import timedelta
from decimal import Decimal

from extensions import db
from models.budget_alerts import BudgetAlert
from models.enums import AlertType


class TestAlertCommands:
    def test_sweep_reports_counts(self, app, clock, make_budget, add_transaction):
        make_budget()
        add_transaction('9500.00')

        result = app.test_cli_runner().invoke(args=['alerts', 'sweep'])

        assert result.exit_code == 0
        assert 'Checked 1 budget(s), created 1 alert(s), 0 failure(s).' in result.output
        assert BudgetAlert.query.one().alert_type == AlertType.THRESHOLD_80

    def test_purge_uses_days_option(self, app, clock, make_budget):
        budget = make_budget()
        db.session.add(BudgetAlert(
            budget_id=budget.id,
            cif_id=budget.cif_id,
            alert_type=AlertType.EXCEEDED,
            current_spending=Decimal('12000.00'),
            budget_limit=Decimal('10000.00'),
            percentage_used=120,
            category=budget.category,
            is_sent=True,
            sent_at=clock.now() - timedelta(days=30),
            created_at=clock.now() - timedelta(days=30),
        ))
        db.session.commit()

        result = app.test_cli_runner().invoke(args=['alerts', 'purge', '--days', '7'])

        assert result.exit_code == 0
        assert 'Deleted 1 alert(s).' in result.output
        assert BudgetAlert.query.count() == 0

    def test_purge_rejects_non_positive_days(self, app, clock):
        result = app.test_cli_runner().invoke(args=['alerts', 'purge', '--days', '0'])
        assert 'must be a positive integer' in result.output


class TestDemoData:
    def test_demo_transactions_follow_clock(self, app, clock):
        from init_db import DEMO_CIF, DEMO_SPENDING, load_demo_data
        from models.transactions import Transaction

        load_demo_data()

        rows = Transaction.query.filter_by(cif_id=DEMO_CIF).all()
        assert len(rows) == len(DEMO_SPENDING) + 1
        newest = max(row.transaction_date for row in rows)
        assert newest == clock.now() - timedelta(days=2)
