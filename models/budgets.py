from datetime import datetime, timezone
from extensions import db
from models.enums import BudgetState, PeriodType


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Budget(db.Model):
    """A customer's spending limit for one category over a date range."""
    __tablename__ = 'budgets'
    __table_args__ = (
        db.Index('idx_budget_cif_category', 'cif_id', 'category'),
        db.Index('idx_budget_state_dates', 'state', 'start_date', 'end_date'),
        db.CheckConstraint('end_date >= start_date', name='ck_budget_date_range'),
    )

    id = db.Column(db.Integer, primary_key=True)
    cif_id = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(100), nullable=False)  # e.g. "Food, drinks", "Transport"
    budget_amount = db.Column(db.Numeric(15, 2), nullable=False)
    period_type = db.Column(db.Enum(PeriodType, native_enum=False, length=20), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    state = db.Column(db.Enum(BudgetState, native_enum=False, length=20), nullable=False, default=BudgetState.ACTIVE)
    alert_threshold_80 = db.Column(db.Boolean, nullable=False, default=True)
    alert_threshold_100 = db.Column(db.Boolean, nullable=False, default=True)
    rollover_enabled = db.Column(db.Boolean, default=False)  # Stored only; not used by alerting
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    alerts = db.relationship('BudgetAlert', back_populates='budget', lazy='dynamic')

    def __repr__(self):
        return f'<Budget {self.id}: {self.cif_id} {self.category} {self.budget_amount}>'

    @property
    def is_active(self):
        return self.state == BudgetState.ACTIVE

    def activate(self):
        self.state = BudgetState.ACTIVE

    def deactivate(self):
        self.state = BudgetState.INACTIVE

    def has_valid_date_range(self):
        if self.start_date is None or self.end_date is None:
            return True
        return self.end_date >= self.start_date

    def to_dict(self):
        return {
            'id': self.id,
            'cif_id': self.cif_id,
            'category': self.category,
            'budget_amount': str(self.budget_amount),
            'period_type': self.period_type.name,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'is_active': self.is_active,
            'alert_threshold_80': self.alert_threshold_80,
            'alert_threshold_100': self.alert_threshold_100,
            'rollover_enabled': bool(self.rollover_enabled),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
