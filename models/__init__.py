# Models package - Import all models for Flask-SQLAlchemy

from models.budgets import Budget
from models.budget_alerts import BudgetAlert
from models.transactions import Transaction
from models.enums import AlertType, BudgetState, BudgetStatus, NotificationChannel, PeriodType

__all__ = [
    'AlertType',
    'Budget',
    'BudgetAlert',
    'BudgetState',
    'BudgetStatus',
    'NotificationChannel',
    'PeriodType',
    'Transaction',
]
