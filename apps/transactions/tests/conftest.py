from datetime import date
from decimal import Decimal

import pytest

from apps.transactions.models import Transaction, TransactionType


@pytest.fixture
def make_transaction(account, user):
    """Factory for transactions in the user's account."""
    def _make(**overrides):
        data = {
            'account': account,
            'date': date(2024, 3, 1),
            'description': 'Office supplies',
            'category': 'Supplies',
            'amount': Decimal('100.00'),
            'type': TransactionType.EXPENSE,
            'payment_source': 'Cash',
            'created_by': user,
        }
        data.update(overrides)
        return Transaction.objects.create(**data)
    return _make
