"""
Bank statement import.

Statements are plain CSV. Optional metadata lines may appear anywhere::

    Opening balance: 150000.00
    Closing balance: 182500.00
    Statement date: 2024-03-31
    Period start: 2024-03-01
    Period end: 2024-03-31
    date,description,amount,type
    2024-03-02,POS Purchase Shoprite,-4500.00,debit
    2024-03-05,Transfer from Ada,37000.00,credit

The type column is optional; without it the sign of the amount decides
(positive is a credit). When given it must name a credit or a debit.
Amounts containing commas must be quoted. Amounts are stored as
absolute values.
"""

import csv
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from django.db import transaction

from apps.reconciliation.models import BankStatement, BankTransaction, BankTransactionType
from apps.transactions.serializers import DATE_INPUT_FORMATS

from .exceptions import StatementParseError

logger = logging.getLogger(__name__)

AMOUNT_PATTERN = r'([+-]?[\d,]+(?:\.\d+)?)'
DATE_PATTERN = r'(\d{4}-\d{2}-\d{2})'

METADATA_PATTERNS = {
    'opening_balance': re.compile(r'opening balance:\s*' + AMOUNT_PATTERN, re.IGNORECASE),
    'closing_balance': re.compile(r'closing balance:\s*' + AMOUNT_PATTERN, re.IGNORECASE),
    'statement_date': re.compile(r'statement date:\s*' + DATE_PATTERN, re.IGNORECASE),
    'period_start': re.compile(r'period start:\s*' + DATE_PATTERN, re.IGNORECASE),
    'period_end': re.compile(r'period end:\s*' + DATE_PATTERN, re.IGNORECASE),
}

METADATA_PREFIXES = tuple(f"{key.replace('_', ' ')}:" for key in METADATA_PATTERNS)

AMOUNT_NOISE = ',₦$£€ '
CREDIT_WORDS = ('credit', 'deposit', 'refund', 'cr')
DEBIT_WORDS = ('debit', 'withdrawal', 'payment', 'purchase', 'charge', 'fee', 'transfer', 'dr')


def _parse_date(value: str) -> date:
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date: {value}")


def _parse_amount(value: str) -> Decimal:
    cleaned = ''.join(c for c in value if c not in AMOUNT_NOISE)
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Unrecognised amount: {value}")
    if not amount.is_finite():
        raise ValueError(f"Unrecognised amount: {value}")
    return amount


def _parse_metadata(key: str, raw: str):
    if key in ('opening_balance', 'closing_balance'):
        return _parse_amount(raw)
    return date.fromisoformat(raw)


def _transaction_type(type_text: str, amount: Decimal) -> str:
    if type_text:
        words = re.findall(r'[a-z]+', type_text.lower())
        if any(word in CREDIT_WORDS for word in words):
            return BankTransactionType.CREDIT
        if any(word in DEBIT_WORDS for word in words):
            return BankTransactionType.DEBIT
        raise ValueError(f"Unrecognised transaction type: {type_text}")
    return BankTransactionType.CREDIT if amount > 0 else BankTransactionType.DEBIT


def parse_statement_csv(content: str) -> dict:
    """
    Parse statement text into metadata and rows.

    Returns:
        dict with ``metadata`` (only keys that were present), ``rows`` (dicts
        with transaction_date, description, amount, transaction_type) and
        ``errors`` (``{'row', 'field', 'message'}`` dicts)
    """
    metadata = {}
    rows = []
    errors = []

    lines = content.lstrip('\ufeff').splitlines()
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line:
            continue

        lowered = line.lower()
        if lowered.startswith(METADATA_PREFIXES):
            for key, pattern in METADATA_PATTERNS.items():
                match = pattern.search(line)
                if not match:
                    continue
                try:
                    metadata[key] = _parse_metadata(key, match.group(1))
                except ValueError as e:
                    errors.append({'row': line_number, 'field': key, 'message': str(e)})
                break
            else:
                errors.append({
                    'row': line_number,
                    'field': 'metadata',
                    'message': f"Could not read value in: {line}",
                })
            continue

        if lowered.startswith('date,'):
            continue

        parts = [part.strip() for part in next(csv.reader([line]))]
        if len(parts) < 3:
            errors.append({
                'row': line_number,
                'field': 'line',
                'message': 'Expected date, description, amount[, type]',
            })
            continue
        if len(parts) > 4:
            errors.append({
                'row': line_number,
                'field': 'line',
                'message': 'Too many columns; quote amounts that contain commas',
            })
            continue

        date_text, description, amount_text = parts[:3]
        type_text = parts[3] if len(parts) > 3 else ''

        try:
            transaction_date = _parse_date(date_text)
        except ValueError as e:
            errors.append({'row': line_number, 'field': 'date', 'message': str(e)})
            continue
        try:
            amount = _parse_amount(amount_text)
        except ValueError as e:
            errors.append({'row': line_number, 'field': 'amount', 'message': str(e)})
            continue
        if not description:
            errors.append({'row': line_number, 'field': 'description', 'message': 'Description is required'})
            continue
        try:
            transaction_type = _transaction_type(type_text, amount)
        except ValueError as e:
            errors.append({'row': line_number, 'field': 'type', 'message': str(e)})
            continue

        rows.append({
            'transaction_date': transaction_date,
            'description': description[:255],
            'amount': abs(amount),
            'transaction_type': transaction_type,
        })

    return {'metadata': metadata, 'rows': rows, 'errors': errors}


@transaction.atomic
def import_statement(
    *,
    account,
    content: str,
    file_name: str = '',
    overrides: Optional[dict] = None,
) -> BankStatement:
    """
    Create a bank statement and its lines from CSV text.

    Metadata given in ``overrides`` (opening_balance, closing_balance,
    statement_date, period_start, period_end, notes) wins over metadata
    found in the file. The period defaults to the first and last line dates
    and the statement date to the period end.

    Raises:
        StatementParseError: If any line is unreadable or there are no lines
    """
    parsed = parse_statement_csv(content)
    if parsed['errors']:
        raise StatementParseError(parsed['errors'])
    rows = parsed['rows']
    if not rows:
        raise StatementParseError([
            {'row': 1, 'field': 'file', 'message': 'No transactions found in statement'}
        ])

    values = dict(parsed['metadata'])
    values.update({key: value for key, value in (overrides or {}).items() if value not in (None, '')})

    dates = [row['transaction_date'] for row in rows]
    period_start = values.get('period_start') or min(dates)
    period_end = values.get('period_end') or max(dates)

    statement = BankStatement.objects.create(
        account=account,
        statement_date=values.get('statement_date') or period_end or date.today(),
        opening_balance=values.get('opening_balance', Decimal('0.00')),
        closing_balance=values.get('closing_balance', Decimal('0.00')),
        period_start=period_start,
        period_end=period_end,
        file_name=file_name,
        notes=values.get('notes', ''),
    )
    BankTransaction.objects.bulk_create([
        BankTransaction(statement=statement, account=account, **row)
        for row in rows
    ])

    logger.info(
        "Imported statement %s with %d lines into account %s",
        statement.id, len(rows), account.id
    )
    return statement
