from datetime import date
from decimal import Decimal

import pytest

from apps.tax.services import get_tax_settings
from apps.transactions.models import Transaction


@pytest.fixture
def book(account, user):
    """Factory for transactions in the 2024 tax year."""
    def _book(amount, txn_type='income', tax_deductible=False, tax_category='', day=date(2024, 6, 1)):
        return Transaction.objects.create(
            account=account,
            date=day,
            description='Entry',
            category='General',
            amount=Decimal(amount),
            type=txn_type,
            payment_source='Bank Transfer',
            tax_deductible=tax_deductible,
            tax_category=tax_category,
            created_by=user,
        )
    return _book


@pytest.fixture
def tax_settings(user):
    return get_tax_settings(user=user)
