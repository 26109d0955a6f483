from datetime import date
from decimal import Decimal

import pytest

from apps.invoices.models import Client
from apps.invoices.services import create_invoice, get_invoice_settings


@pytest.fixture
def billing_client(account):
    """A client of the user's business."""
    return Client.objects.create(
        account=account,
        name='Acme Stores',
        email='accounts@acme.example.com',
    )


@pytest.fixture
def foreign_client(other_account):
    return Client.objects.create(account=other_account, name='Elsewhere Ltd')


@pytest.fixture
def invoice_items():
    return [
        {'description': 'Design work', 'quantity': Decimal('2'), 'unit_price': Decimal('500.00')},
        {'description': 'Hosting', 'quantity': Decimal('1'), 'unit_price': Decimal('0.50')},
    ]


@pytest.fixture
def invoice(account, user, billing_client, invoice_items):
    """A draft invoice: subtotal 1000.50, 7.5% tax."""
    return create_invoice(
        account=account,
        user=user,
        client=billing_client,
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        items=invoice_items,
        tax_rate=Decimal('7.5'),
    )


@pytest.fixture
def bank_details(account):
    invoice_settings = get_invoice_settings(account=account)
    invoice_settings.business_name = 'Test Studio'
    invoice_settings.email = 'hello@studio.example.com'
    invoice_settings.bank_name = 'First Bank'
    invoice_settings.account_name = 'Test Studio Ltd'
    invoice_settings.account_number = '0123456789'
    invoice_settings.save()
    return invoice_settings
