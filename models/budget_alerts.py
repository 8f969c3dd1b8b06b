from datetime import datetime, timezone
from extensions import db
from models.enums import AlertType


class BudgetAlert(db.Model):
    """Snapshot of a budget crossing one of its thresholds.

    Only ``is_sent``/``sent_at`` change after creation, and only once
    (UNSENT -> SENT) via ``mark_as_sent``.
    """
    __tablename__ = 'budget_alerts'
    __table_args__ = (
        db.Index('idx_alert_cif_sent', 'cif_id', 'is_sent'),
        db.Index('idx_alert_budget_type', 'budget_id', 'alert_type'),
        db.Index('idx_alert_created_at', 'created_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    budget_id = db.Column(db.Integer, db.ForeignKey('budgets.id'), nullable=False)
    cif_id = db.Column(db.String(100), nullable=False)
    alert_type = db.Column(db.Enum(AlertType, native_enum=False, length=30), nullable=False)
    current_spending = db.Column(db.Numeric(15, 2))
    budget_limit = db.Column(db.Numeric(15, 2))
    percentage_used = db.Column(db.Integer)
    category = db.Column(db.String(100))
    alert_message = db.Column(db.Text)
    is_sent = db.Column(db.Boolean, nullable=False, default=False)
    sent_at = db.Column(db.DateTime)
    notification_channels = db.Column(db.String(100))  # Comma-separated: SMS,EMAIL,PUSH
    created_at = db.Column(db.DateTime, nullable=False,
                           default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    budget = db.relationship('Budget', back_populates='alerts')

    def __repr__(self):
        return f'<BudgetAlert {self.id}: budget {self.budget_id} {self.alert_type.name if self.alert_type else None}>'

    @property
    def channels(self):
        if not self.notification_channels:
            return []
        return self.notification_channels.split(',')

    def mark_as_sent(self, when):
        """Record delivery.  A second call leaves the original ``sent_at``."""
        if self.is_sent:
            return False
        self.is_sent = True
        self.sent_at = when
        return True

    def to_dict(self):
        return {
            'id': self.id,
            'budget_id': self.budget_id,
            'cif_id': self.cif_id,
            'alert_type': self.alert_type.name,
            'category': self.category,
            'current_spending': str(self.current_spending) if self.current_spending is not None else None,
            'budget_limit': str(self.budget_limit) if self.budget_limit is not None else None,
            'percentage_used': self.percentage_used,
            'alert_message': self.alert_message,
            'is_sent': bool(self.is_sent),
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'notification_channels': self.channels,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
