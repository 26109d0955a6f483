"""
Invoice arithmetic and due-date helpers.

All money values are Decimals rounded half-up to cents.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
FINAL_STATUSES = ('paid', 'cancelled')


def _to_decimal(value) -> Decimal:
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_cents(value) -> Decimal:
    return _to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_line_amount(quantity, unit_price) -> Decimal:
    """quantity x unit_price, rounded to cents. Missing values count as 0."""
    return to_cents(_to_decimal(quantity) * _to_decimal(unit_price))


def calculate_totals(items: Iterable[dict], tax_rate) -> dict:
    """
    Compute subtotal, tax and total for a list of line items.

    Args:
        items: Dicts with ``quantity`` and ``unit_price`` keys
        tax_rate: Percentage, e.g. ``7.5`` for 7.5%

    Returns:
        dict with ``subtotal``, ``tax_amount`` and ``total``
    """
    subtotal = sum(
        (calculate_line_amount(item.get('quantity'), item.get('unit_price')) for item in items),
        ZERO,
    )
    tax_amount = to_cents(subtotal * _to_decimal(tax_rate) / Decimal('100'))
    return {
        'subtotal': subtotal,
        'tax_amount': tax_amount,
        'total': subtotal + tax_amount,
    }


def days_until_due(due_date: date, today: Optional[date] = None) -> int:
    """Whole days from ``today`` to ``due_date``; negative once overdue."""
    today = today or date.today()
    return (due_date - today).days


def is_overdue(invoice, today: Optional[date] = None) -> bool:
    """True when an open invoice is past its due date."""
    if invoice.status in FINAL_STATUSES:
        return False
    return days_until_due(invoice.due_date, today) < 0


def due_status_text(due_date: date, today: Optional[date] = None, status: str = '') -> str:
    """
    Human readable due status, e.g. "3 days overdue" or "Due tomorrow".

    Paid and cancelled invoices report their status instead.
    """
    if status == 'paid':
        return 'Paid'
    if status == 'cancelled':
        return 'Cancelled'

    days = days_until_due(due_date, today)
    if days < 0:
        overdue = -days
        return f"{overdue} day{'s' if overdue != 1 else ''} overdue"
    if days == 0:
        return 'Due today'
    if days == 1:
        return 'Due tomorrow'
    return f"Due in {days} days"
