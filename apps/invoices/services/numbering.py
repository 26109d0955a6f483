"""Per-account, per-year invoice numbering."""

import logging
from datetime import date
from typing import Optional

from django.db import transaction

from apps.invoices.models import InvoiceSequence, InvoiceSettings

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = 'INV'


def _prefix_for(account) -> str:
    prefix = (
        InvoiceSettings.objects
        .filter(account=account)
        .values_list('invoice_prefix', flat=True)
        .first()
    )
    return (prefix or DEFAULT_PREFIX).strip() or DEFAULT_PREFIX


def format_invoice_number(prefix: str, year: int, number: int) -> str:
    return f"{prefix}-{year}-{number:04d}"


@transaction.atomic
def generate_invoice_number(*, account, year: Optional[int] = None) -> str:
    """
    Reserve and return the next invoice number, e.g. ``INV-2024-0007``.

    The sequence row is locked so concurrent invoices never share a number.
    """
    year = year or date.today().year
    sequence, _ = InvoiceSequence.objects.get_or_create(account=account, year=year)
    sequence = InvoiceSequence.objects.select_for_update().get(pk=sequence.pk)
    sequence.last_number += 1
    sequence.save(update_fields=['last_number'])

    number = format_invoice_number(_prefix_for(account), year, sequence.last_number)
    logger.debug("Reserved invoice number %s for account %s", number, account.id)
    return number


def preview_invoice_number(*, account, year: Optional[int] = None) -> str:
    """The number the next invoice would get, without reserving it."""
    year = year or date.today().year
    last_number = (
        InvoiceSequence.objects
        .filter(account=account, year=year)
        .values_list('last_number', flat=True)
        .first()
    ) or 0
    return format_invoice_number(_prefix_for(account), year, last_number + 1)
