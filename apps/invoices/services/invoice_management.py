"""
Invoice lifecycle service.

Creating and editing invoices (totals are always recomputed from the
items), status changes, and recording payment as an income transaction.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.invoices.models import Client, Invoice, InvoiceItem, InvoiceSettings, InvoiceStatus
from apps.transactions.models import Category, Transaction, TransactionType

from .calculations import calculate_line_amount, calculate_totals
from .exceptions import (
    ClientNotFoundError,
    InvalidInvoiceError,
    InvalidStatusTransitionError,
    InvoiceAlreadyPaidError,
    InvoiceNotFoundError,
)
from .numbering import generate_invoice_number

logger = logging.getLogger(__name__)

PAYMENT_CATEGORY = 'Invoice Payment'
DEFAULT_PAYMENT_SOURCE = 'Bank Transfer'


def get_invoice_settings(*, account) -> InvoiceSettings:
    """Return the account's invoice settings, creating defaults on first use."""
    settings_obj, _ = InvoiceSettings.objects.get_or_create(account=account)
    return settings_obj


def _get_locked_invoice(invoice_id: UUID, account) -> Invoice:
    try:
        return (
            Invoice.objects
            .select_for_update()
            .select_related('client')
            .get(id=invoice_id, account=account)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")


def _check_client(client: Client, account) -> None:
    if client.account_id != account.id:
        raise ClientNotFoundError("Client not found")


def _check_dates(invoice_date: date, due_date: date) -> None:
    if due_date < invoice_date:
        raise InvalidInvoiceError("Due date cannot be before invoice date")


def _replace_items(invoice: Invoice, items: List[dict]) -> None:
    invoice.items.all().delete()
    InvoiceItem.objects.bulk_create([
        InvoiceItem(
            invoice=invoice,
            description=item['description'],
            quantity=item['quantity'],
            unit_price=item['unit_price'],
            amount=calculate_line_amount(item['quantity'], item['unit_price']),
            position=position,
        )
        for position, item in enumerate(items)
    ])


def _apply_totals(invoice: Invoice, items: List[dict]) -> None:
    totals = calculate_totals(items, invoice.tax_rate)
    invoice.subtotal = totals['subtotal']
    invoice.tax_amount = totals['tax_amount']
    invoice.total = totals['total']


@transaction.atomic
def create_invoice(
    *,
    account,
    user,
    client: Client,
    invoice_date: date,
    due_date: date,
    items: List[dict],
    tax_rate: Decimal = Decimal('0'),
    notes: str = '',
    terms: str = '',
    status: str = InvoiceStatus.DRAFT,
) -> Invoice:
    """
    Create an invoice with its line items.

    Args:
        account: Account issuing the invoice
        user: User creating it
        client: Client in the same account
        invoice_date: Issue date
        due_date: Payment due date (not before invoice_date)
        items: Dicts with description, quantity and unit_price
        tax_rate: Tax percentage applied to the subtotal
        notes: Free text shown on the invoice
        terms: Payment terms (defaults to the account's payment terms)
        status: Initial status, draft unless given

    Returns:
        Created Invoice

    Raises:
        ClientNotFoundError: If the client belongs to another account
        InvalidInvoiceError: If dates or items are invalid
    """
    _check_client(client, account)
    _check_dates(invoice_date, due_date)
    if not items:
        raise InvalidInvoiceError("An invoice needs at least one item")
    if status == InvoiceStatus.PAID:
        raise InvalidInvoiceError("Create the invoice first, then mark it as paid")

    invoice_settings = get_invoice_settings(account=account)

    invoice = Invoice(
        account=account,
        client=client,
        invoice_number=generate_invoice_number(account=account, year=invoice_date.year),
        invoice_date=invoice_date,
        due_date=due_date,
        status=status,
        tax_rate=tax_rate,
        notes=notes or invoice_settings.default_notes,
        terms=terms or invoice_settings.default_payment_terms,
        created_by=user,
    )
    _apply_totals(invoice, items)
    invoice.save()
    _replace_items(invoice, items)

    logger.info("Created invoice %s (%s) for account %s", invoice.invoice_number, invoice.id, account.id)
    return invoice


@transaction.atomic
def update_invoice(
    *,
    invoice_id: UUID,
    account,
    client: Optional[Client] = None,
    invoice_date: Optional[date] = None,
    due_date: Optional[date] = None,
    items: Optional[List[dict]] = None,
    tax_rate: Optional[Decimal] = None,
    notes: Optional[str] = None,
    terms: Optional[str] = None,
) -> Invoice:
    """
    Edit an open invoice. Omitted fields keep their value.

    When ``items`` is given the existing items are replaced; totals are
    recomputed either way so a new tax rate takes effect.

    Raises:
        InvoiceNotFoundError: If the invoice is not in the account
        ClientNotFoundError: If the new client belongs to another account
        InvalidInvoiceError: If the invoice is paid or cancelled, or dates are invalid
    """
    invoice = _get_locked_invoice(invoice_id, account)
    if invoice.is_final:
        raise InvalidInvoiceError(f"A {invoice.status} invoice cannot be edited")

    if client is not None:
        _check_client(client, account)
        invoice.client = client
    if invoice_date is not None:
        invoice.invoice_date = invoice_date
    if due_date is not None:
        invoice.due_date = due_date
    if tax_rate is not None:
        invoice.tax_rate = tax_rate
    if notes is not None:
        invoice.notes = notes
    if terms is not None:
        invoice.terms = terms

    _check_dates(invoice.invoice_date, invoice.due_date)

    if items is not None:
        if not items:
            raise InvalidInvoiceError("An invoice needs at least one item")
        _replace_items(invoice, items)
    else:
        items = list(invoice.items.values('quantity', 'unit_price'))

    _apply_totals(invoice, items)
    invoice.save()
    return invoice


@transaction.atomic
def mark_invoice_paid(
    *,
    invoice_id: UUID,
    account,
    user,
    payment_source: str = DEFAULT_PAYMENT_SOURCE,
    paid_date: Optional[date] = None,
) -> Invoice:
    """
    Record payment of an invoice.

    Creates an income transaction for the invoice total and links it to
    the invoice.

    Raises:
        InvoiceNotFoundError: If the invoice is not in the account
        InvoiceAlreadyPaidError: If the invoice is already paid
        InvalidStatusTransitionError: If the invoice is cancelled
    """
    invoice = _get_locked_invoice(invoice_id, account)
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceAlreadyPaidError(f"Invoice {invoice.invoice_number} is already paid")
    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvalidStatusTransitionError("A cancelled invoice cannot be paid")

    paid_date = paid_date or date.today()
    payment_source = payment_source or DEFAULT_PAYMENT_SOURCE
    client_name = invoice.client.name if invoice.client_id else 'Client'

    Category.objects.get_or_create(
        account=account,
        name=PAYMENT_CATEGORY,
        type=TransactionType.INCOME,
    )
    payment = Transaction.objects.create(
        account=account,
        date=paid_date,
        description=f"Invoice {invoice.invoice_number} - {client_name}",
        category=PAYMENT_CATEGORY,
        amount=invoice.total,
        type=TransactionType.INCOME,
        payment_source=payment_source,
        notes=(
            f"Payment for invoice {invoice.invoice_number} via {payment_source}. "
            f"Subtotal: {invoice.subtotal}, Tax: {invoice.tax_amount}"
        ),
        created_by=user,
    )

    invoice.status = InvoiceStatus.PAID
    invoice.paid_date = paid_date
    invoice.transaction = payment
    invoice.save(update_fields=['status', 'paid_date', 'transaction', 'updated_at'])

    logger.info("Invoice %s paid, transaction %s", invoice.invoice_number, payment.id)
    return invoice


@transaction.atomic
def update_invoice_status(
    *,
    invoice_id: UUID,
    account,
    user,
    status: str,
    payment_source: str = DEFAULT_PAYMENT_SOURCE,
) -> Invoice:
    """
    Move an invoice to ``status``.

    Paid and cancelled are final. Moving to paid records the payment
    through ``mark_invoice_paid``.

    Raises:
        InvoiceNotFoundError: If the invoice is not in the account
        InvalidStatusTransitionError: If the invoice is paid or cancelled
    """
    invoice = _get_locked_invoice(invoice_id, account)

    if invoice.status == status:
        return invoice
    if invoice.is_final:
        raise InvalidStatusTransitionError(
            f"Cannot change a {invoice.status} invoice to {status}"
        )

    if status == InvoiceStatus.PAID:
        return mark_invoice_paid(
            invoice_id=invoice.id,
            account=account,
            user=user,
            payment_source=payment_source,
        )

    invoice.status = status
    update_fields = ['status', 'updated_at']
    if status == InvoiceStatus.SENT and invoice.sent_at is None:
        invoice.sent_at = timezone.now()
        update_fields.append('sent_at')
    invoice.save(update_fields=update_fields)
    return invoice


def mark_overdue_invoices(*, today: Optional[date] = None, account=None) -> int:
    """
    Flag sent invoices past their due date as overdue.

    Returns:
        Number of invoices updated
    """
    today = today or date.today()
    queryset = Invoice.objects.filter(status=InvoiceStatus.SENT, due_date__lt=today)
    if account is not None:
        queryset = queryset.filter(account=account)

    updated = queryset.update(status=InvoiceStatus.OVERDUE)
    if updated:
        logger.info("Marked %d invoice(s) overdue", updated)
    return updated
