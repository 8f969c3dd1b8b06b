from decimal import Decimal
from datetime import datetime, timezone
from extensions import db


class Transaction(db.Model):
    """Core-banking transaction row with its ML-assigned category.

    Column names follow the existing ``transactions`` table.
    """
    __tablename__ = 'transactions'
    __table_args__ = (
        db.Index('idx_trans_cif_category_date', 'cif_id', 'category', 'tran_date'),
        db.Index('idx_trans_cif_date_range', 'cif_id', 'tran_date', 'pstd_date'),
    )

    DEBIT = 'DEBIT'
    CREDIT = 'CREDIT'

    id = db.Column(db.Integer, primary_key=True)
    source_table = db.Column(db.String(3))
    transaction_date = db.Column('tran_date', db.DateTime)
    posted_date = db.Column('pstd_date', db.DateTime)
    transaction_id = db.Column('tran_id', db.String(100))
    cif_id = db.Column(db.String(100), nullable=False)
    account_id = db.Column('acid', db.String(100))
    for_account_id = db.Column('foracid', db.String(100))
    part_transaction_type = db.Column('part_tran_type', db.String(50))  # DEBIT or CREDIT
    transaction_amount = db.Column('tran_amt', db.Numeric(15, 2))
    transaction_particular = db.Column('tran_particular', db.Text)
    merchant = db.Column(db.String(500))
    user_part_transaction_code = db.Column('user_part_tran_code', db.String(50))
    subcategory = db.Column(db.String(100))
    category = db.Column(db.String(100))
    confidence = db.Column(db.Float)  # ML confidence score (0.0 to 1.0)
    migration_status = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    processed_at = db.Column(db.DateTime, onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def __repr__(self):
        return f'<Transaction {self.transaction_date}: {self.merchant} - {self.transaction_amount}>'

    @property
    def is_expense(self):
        if (self.part_transaction_type or '').upper() == self.DEBIT:
            return True
        return self.transaction_amount is not None and self.transaction_amount < 0

    @property
    def is_income(self):
        if (self.part_transaction_type or '').upper() == self.CREDIT:
            return True
        return self.transaction_amount is not None and self.transaction_amount > 0

    @property
    def absolute_amount(self):
        if self.transaction_amount is None:
            return Decimal('0')
        return abs(Decimal(str(self.transaction_amount)))

    def to_dict(self):
        return {
            'id': self.id,
            'transaction_id': self.transaction_id,
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'posted_date': self.posted_date.isoformat() if self.posted_date else None,
            'merchant': self.merchant,
            'transaction_particular': self.transaction_particular,
            'amount': str(self.transaction_amount) if self.transaction_amount is not None else None,
            'transaction_type': self.part_transaction_type,
            'category': self.category,
            'subcategory': self.subcategory,
            'confidence': self.confidence,
        }
