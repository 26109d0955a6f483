"""Emailing invoices to clients."""

import logging
from smtplib import SMTPException
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.mail import EmailMessage
from django.db import transaction
from django.utils import timezone

from apps.invoices.models import Invoice, InvoiceStatus

from .calculations import due_status_text
from .exceptions import InvoiceEmailError, InvoiceNotFoundError, MissingRecipientError
from .invoice_management import get_invoice_settings

logger = logging.getLogger(__name__)


def invoice_public_url(invoice: Invoice) -> str:
    return f"{settings.FRONTEND_URL}/invoice/{invoice.share_token}"


def _format_money(amount, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def build_invoice_email_body(invoice: Invoice, business_name: str, message: str = '') -> str:
    currency = invoice.account.currency
    lines = [f"Dear {invoice.client.name},", ""]
    if message:
        lines += [message, ""]
    lines += [
        f"Please find below invoice {invoice.invoice_number} from {business_name}.",
        "",
        f"Invoice date: {invoice.invoice_date:%d %b %Y}",
        f"Due date: {invoice.due_date:%d %b %Y} ({due_status_text(invoice.due_date, status=invoice.status)})",
        "",
    ]
    for item in invoice.items.all():
        lines.append(
            f"  {item.description}: {item.quantity} x {_format_money(item.unit_price, currency)}"
            f" = {_format_money(item.amount, currency)}"
        )
    lines += [
        "",
        f"Subtotal: {_format_money(invoice.subtotal, currency)}",
        f"Tax ({invoice.tax_rate}%): {_format_money(invoice.tax_amount, currency)}",
        f"Total due: {_format_money(invoice.total, currency)}",
        "",
        f"View the invoice online: {invoice_public_url(invoice)}",
    ]
    if invoice.terms:
        lines += ["", invoice.terms]
    return "\n".join(lines)


@transaction.atomic
def send_invoice_email(
    *,
    invoice_id: UUID,
    account,
    recipient: Optional[str] = None,
    message: str = '',
) -> Invoice:
    """
    Email an invoice to its client.

    A draft invoice becomes ``sent``.

    Args:
        invoice_id: Invoice to send
        account: Account owning the invoice
        recipient: Address to use instead of the client's email
        message: Optional note placed above the invoice details

    Returns:
        The updated Invoice

    Raises:
        InvoiceNotFoundError: If the invoice is not in the account
        MissingRecipientError: If neither recipient nor client email is set
    """
    try:
        invoice = (
            Invoice.objects
            .select_for_update()
            .select_related('client', 'account')
            .get(id=invoice_id, account=account)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")

    to_address = recipient or invoice.client.email
    if not to_address:
        raise MissingRecipientError("Client has no email address")

    invoice_settings = get_invoice_settings(account=account)
    business_name = invoice_settings.business_name or account.name

    email = EmailMessage(
        subject=f"Invoice {invoice.invoice_number} from {business_name}",
        body=build_invoice_email_body(invoice, business_name, message),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_address],
        reply_to=[invoice_settings.email] if invoice_settings.email else None,
    )
    try:
        email.send()
    except (SMTPException, OSError) as e:
        logger.error("Invoice %s email to %s failed: %s", invoice.invoice_number, to_address, e)
        raise InvoiceEmailError(f"Could not send invoice email: {e}")

    update_fields = ['sent_at', 'updated_at']
    invoice.sent_at = timezone.now()
    if invoice.status == InvoiceStatus.DRAFT:
        invoice.status = InvoiceStatus.SENT
        update_fields.append('status')
    invoice.save(update_fields=update_fields)

    logger.info("Sent invoice %s to %s", invoice.invoice_number, to_address)
    return invoice
