"""
Create the budget tracking tables and optionally load demo transactions.

    python init_db.py            # tables only
    python init_db.py --demo     # tables plus a month of sample data for CIF DEMO001
"""
import sys
from datetime import timedelta
from decimal import Decimal

from app import create_app
from extensions import db
from models import Transaction
from utils.clock import get_clock

DEMO_CIF = 'DEMO001'

DEMO_SPENDING = [
    # (days ago, merchant, category, amount)
    (2, 'Naivas Supermarket', 'Food, drinks', Decimal('3450.00')),
    (5, 'Java House', 'Food, drinks', Decimal('1200.00')),
    (7, 'Uber', 'Transport', Decimal('850.00')),
    (9, 'Shell Westlands', 'Transport', Decimal('4000.00')),
    (12, 'Kenya Power', 'Utilities', Decimal('2750.00')),
    (15, 'Carrefour', 'Food, drinks', Decimal('5620.00')),
    (20, 'Safaricom', 'Utilities', Decimal('1000.00')),
    (24, 'Bata', 'Shopping', Decimal('3999.00')),
]


def load_demo_data():
    if Transaction.query.filter_by(cif_id=DEMO_CIF).first():
        print(f"Demo data already present for {DEMO_CIF}")
        return

    now = get_clock().now()
    db.session.add(Transaction(
        cif_id=DEMO_CIF,
        transaction_date=now - timedelta(days=25),
        part_transaction_type=Transaction.CREDIT,
        transaction_amount=Decimal('85000.00'),
        transaction_particular='SALARY',
        category='Income',
    ))
    for days_ago, merchant, category, amount in DEMO_SPENDING:
        db.session.add(Transaction(
            cif_id=DEMO_CIF,
            transaction_date=now - timedelta(days=days_ago),
            part_transaction_type=Transaction.DEBIT,
            transaction_amount=-amount,
            merchant=merchant,
            category=category,
            confidence=0.92,
        ))
    db.session.commit()
    print(f"✓ Loaded {len(DEMO_SPENDING) + 1} demo transactions for {DEMO_CIF}")


def init_db(demo=False):
    """Initialize the database"""
    app = create_app('development')

    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print("✓ Database tables created successfully!")
        print(f"Database location: {app.config['SQLALCHEMY_DATABASE_URI']}")

        print("\nTables created:")
        for table in db.metadata.sorted_tables:
            print(f"  - {table.name}")

        if demo:
            load_demo_data()


if __name__ == '__main__':
    init_db(demo='--demo' in sys.argv)
