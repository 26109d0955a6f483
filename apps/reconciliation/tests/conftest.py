from datetime import date
from decimal import Decimal

import pytest

from apps.reconciliation.services import import_statement
from apps.transactions.models import Transaction


STATEMENT_CSV = (
    "Opening balance: 1,000.00\n"
    "Closing balance: 1,400.00\n"
    "date,description,amount,type\n"
    "2024-03-02,POS Purchase Shoprite,-100.00,debit\n"
    "2024-03-05,Transfer from Ada,500.00,credit\n"
)


@pytest.fixture
def statement(account):
    return import_statement(account=account, content=STATEMENT_CSV, file_name='march.csv')


@pytest.fixture
def record(account, user):
    """Factory for recorded transactions."""
    def _record(description, amount, txn_type, day):
        return Transaction.objects.create(
            account=account,
            date=day,
            description=description,
            category='General',
            amount=Decimal(amount),
            type=txn_type,
            payment_source='Bank Transfer',
            created_by=user,
        )
    return _record


@pytest.fixture
def matching_records(record):
    """Recorded transactions that line up with STATEMENT_CSV."""
    return {
        'purchase': record('Groceries', '100.00', 'expense', date(2024, 3, 3)),
        'transfer': record('Payment from Ada', '500.00', 'income', date(2024, 3, 5)),
    }


@pytest.fixture
def statement_csv():
    return STATEMENT_CSV
