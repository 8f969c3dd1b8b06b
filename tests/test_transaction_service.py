"""
Integration tests for TransactionService queries and aggregates.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from extensions import db
from models.transactions import Transaction
from services.transaction_service import TransactionService
from utils.exceptions import TransactionNotFoundError, ValidationFailedError

CIF = 'CIF001'
JUNE_START = datetime(2024, 6, 1)
JUNE_END = datetime(2024, 6, 30, 23, 59, 59)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class TestAggregates:
    def test_category_spending_sums_absolute_debits(self, clock, add_transaction):
        add_transaction('1200.50')
        add_transaction('300.25', when=datetime(2024, 6, 2, 8, 0))
        add_transaction('99.00', kind='CREDIT')          # refund
        add_transaction('40.00', category='Transport')
        add_transaction('75.00', cif_id='CIF002')

        total = TransactionService.calculate_category_spending(CIF, 'Food, drinks', JUNE_START, JUNE_END)
        assert total == Decimal('1500.75')

    def test_no_matches_is_zero(self, clock):
        total = TransactionService.calculate_category_spending(CIF, 'Food, drinks', JUNE_START, JUNE_END)
        assert total == Decimal('0.00')

    def test_range_bounds_are_inclusive(self, clock, add_transaction):
        add_transaction('10.00', when=JUNE_START)
        add_transaction('20.00', when=JUNE_END)
        add_transaction('40.00', when=datetime(2024, 7, 1, 0, 0, 0))
        total = TransactionService.calculate_category_spending(CIF, 'Food, drinks', JUNE_START, JUNE_END)
        assert total == Decimal('30.00')

    def test_total_expenses_and_income(self, clock, add_transaction):
        add_transaction('500.00')
        add_transaction('250.00', category='Transport')
        add_transaction('40000.00', category='Income', kind='CREDIT')

        assert TransactionService.calculate_total_expenses(CIF, JUNE_START, JUNE_END) == Decimal('750.00')
        assert TransactionService.calculate_total_income(CIF, JUNE_START, JUNE_END) == Decimal('40000.00')

    def test_category_wise_spending_sorted_desc(self, clock, add_transaction):
        add_transaction('100.00', category='Transport')
        add_transaction('900.00')
        add_transaction('50.00')

        rows = TransactionService.get_category_wise_spending(CIF, JUNE_START, JUNE_END)
        assert rows == [
            ('Food, drinks', Decimal('950.00'), 2),
            ('Transport', Decimal('100.00'), 1),
        ]

    def test_top_merchants(self, clock, add_transaction):
        add_transaction('100.00', merchant='Uber')
        add_transaction('900.00', merchant='Carrefour')
        add_transaction('300.00', merchant='Java House')
        add_transaction('250.00', merchant='Java House')

        merchants = TransactionService.get_top_merchants(CIF, JUNE_START, JUNE_END, limit=2)
        assert merchants == ['Carrefour', 'Java House']


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListing:
    def test_customer_transactions_paginated_newest_first(self, clock, add_transaction):
        for day in range(1, 6):
            add_transaction('10.00', when=datetime(2024, 6, day, 12, 0))

        page = TransactionService.get_transactions_by_customer(CIF, page=0, size=2)
        assert page.total == 5
        assert page.pages == 3
        assert [t.transaction_date.day for t in page.items] == [5, 4]

        last = TransactionService.get_transactions_by_customer(CIF, page=2, size=2)
        assert [t.transaction_date.day for t in last.items] == [1]

    def test_filter_by_category_returns_only_debits(self, clock, add_transaction):
        add_transaction('10.00')
        add_transaction('20.00', kind='CREDIT')
        add_transaction('30.00', category='Transport')

        page = TransactionService.get_transactions_with_filter(CIF, JUNE_START, JUNE_END, category='Food, drinks')
        assert page.total == 1
        assert page.items[0].part_transaction_type == Transaction.DEBIT

    def test_filter_without_category_returns_everything_in_range(self, clock, add_transaction):
        add_transaction('10.00')
        add_transaction('20.00', kind='CREDIT')
        add_transaction('30.00', when=datetime(2024, 5, 1))

        page = TransactionService.get_transactions_with_filter(CIF, JUNE_START, JUNE_END)
        assert page.total == 2

    def test_filter_sort_by_amount_ascending(self, clock, add_transaction):
        add_transaction('30.00', when=datetime(2024, 6, 3))
        add_transaction('10.00', when=datetime(2024, 6, 4))
        add_transaction('20.00', when=datetime(2024, 6, 5))

        # Debits are stored negative, so ascending amount puts the largest spend first
        page = TransactionService.get_transactions_with_filter(
            CIF, JUNE_START, JUNE_END, sort_by='amount', sort_direction='asc',
        )
        assert [t.transaction_amount for t in page.items] == [
            Decimal('-30.00'), Decimal('-20.00'), Decimal('-10.00'),
        ]

    def test_unknown_sort_field(self, clock):
        with pytest.raises(ValidationFailedError) as exc:
            TransactionService.get_transactions_with_filter(CIF, JUNE_START, JUNE_END, sort_by='tran_amt')
        assert exc.value.errors[0]['field'] == 'sort_by'

    def test_unknown_sort_direction(self, clock):
        with pytest.raises(ValidationFailedError):
            TransactionService.get_transactions_with_filter(CIF, JUNE_START, JUNE_END, sort_direction='UP')

    def test_uncategorized_within_months(self, clock, add_transaction):
        add_transaction('10.00', category=None)
        add_transaction('20.00', category='')
        add_transaction('30.00', category=None, when=datetime(2023, 11, 1))  # older than 6 months
        add_transaction('40.00')

        rows = TransactionService.get_uncategorized_transactions(CIF, months=6)
        assert sorted(t.absolute_amount for t in rows) == [Decimal('10.00'), Decimal('20.00')]

    def test_distinct_categories(self, clock, add_transaction):
        add_transaction('10.00', category='Transport')
        add_transaction('10.00')
        add_transaction('10.00', category=None)
        add_transaction('10.00', category='Shopping', cif_id='CIF002')

        assert TransactionService.get_distinct_categories(CIF) == ['Food, drinks', 'Transport']
        assert TransactionService.get_distinct_categories() == ['Food, drinks', 'Shopping', 'Transport']


# ---------------------------------------------------------------------------
# Re-categorisation
# ---------------------------------------------------------------------------

class TestRecategorize:
    def test_sets_category_and_full_confidence(self, clock, add_transaction):
        txn = add_transaction('10.00', category=None)
        TransactionService.recategorize_transaction(txn.id, 'Transport')

        stored = db.session.get(Transaction, txn.id)
        assert stored.category == 'Transport'
        assert stored.confidence == 1.0

    def test_missing_transaction(self, clock):
        with pytest.raises(TransactionNotFoundError) as exc:
            TransactionService.recategorize_transaction(77, 'Transport')
        assert exc.value.message == 'Transaction not found with ID: 77'
