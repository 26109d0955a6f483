import pytest
from datetime import date
from decimal import Decimal

from apps.transactions.models import Transaction


@pytest.fixture
def ledger(account, user):
    """
    February to April 2024 activity.

    March: income 4000 (Sales 3000, Consulting 1000), expenses 1100
    (Rent 800 by transfer, Supplies 200 + 100 in cash). February nets 800.
    """
    rows = [
        (date(2024, 2, 20), 'Sales', 'income', '1000.00', 'Card'),
        (date(2024, 2, 25), 'Rent', 'expense', '200.00', 'Bank Transfer'),
        (date(2024, 3, 2), 'Sales', 'income', '3000.00', 'Card'),
        (date(2024, 3, 5), 'Rent', 'expense', '800.00', 'Bank Transfer'),
        (date(2024, 3, 10), 'Consulting', 'income', '1000.00', 'Bank Transfer'),
        (date(2024, 3, 15), 'Supplies', 'expense', '200.00', 'Cash'),
        (date(2024, 3, 20), 'Supplies', 'expense', '100.00', 'Cash'),
        (date(2024, 4, 3), 'Fuel', 'expense', '50.00', 'Cash'),
    ]
    return [
        Transaction.objects.create(
            account=account,
            date=day,
            description=f'{category} entry',
            category=category,
            type=txn_type,
            amount=Decimal(amount),
            payment_source=source,
            created_by=user,
        )
        for day, category, txn_type, amount, source in rows
    ]
