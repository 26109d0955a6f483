"""
Bulk transaction import from CSV.

Expected layout: one header row, then one transaction per line. Headers are
matched case-insensitively and may use ``payment source`` or
``payment_source``. Every row is validated before anything is written, so
an upload either succeeds completely or creates nothing.

Example::

    date,description,category,amount,type,payment source,notes
    2024-03-01,Office rent,Rent,150000,expense,Bank Transfer,March
    2024-03-02,Website build,Services,420000,income,Bank Transfer,
"""

import csv
import io
import logging
from typing import List, Tuple

from django.db import transaction

from apps.transactions.models import Transaction
from apps.transactions.serializers import TransactionImportRowSerializer

from .exceptions import BulkUploadError

logger = logging.getLogger(__name__)

HEADER_ALIASES = {
    'date': 'date',
    'description': 'description',
    'category': 'category',
    'amount': 'amount',
    'type': 'type',
    'payment_source': 'payment_source',
    'payment source': 'payment_source',
    'notes': 'notes',
}

REQUIRED_COLUMNS = ['date', 'description', 'category', 'amount', 'type', 'payment_source']

# Characters users paste along with amounts
AMOUNT_NOISE = ',₦$£€ '


def _normalise_header(name):
    return ' '.join((name or '').strip().lower().split())


def _clean_amount(value):
    return ''.join(c for c in value if c not in AMOUNT_NOISE)


def parse_transactions_csv(content: str) -> Tuple[List[dict], List[dict]]:
    """
    Parse and validate CSV text.

    Args:
        content: Raw CSV text (a leading BOM is ignored)

    Returns:
        Tuple of (valid rows as dicts of cleaned values, row errors). Each
        error is ``{'row': int, 'field': str, 'message': str}`` where row 1
        is the header line.
    """
    reader = csv.reader(io.StringIO(content.lstrip('\ufeff')))

    try:
        header = next(reader)
    except StopIteration:
        return [], [{'row': 1, 'field': 'file', 'message': 'File is empty'}]

    columns = [HEADER_ALIASES.get(_normalise_header(name)) for name in header]
    missing = [column for column in REQUIRED_COLUMNS if column not in columns]
    if missing:
        return [], [
            {'row': 1, 'field': column, 'message': f'Missing column: {column}'}
            for column in missing
        ]

    rows = []
    errors = []
    for values in reader:
        if not any(value.strip() for value in values):
            continue

        record = {
            column: value.strip()
            for column, value in zip(columns, values)
            if column is not None
        }
        if 'amount' in record:
            record['amount'] = _clean_amount(record['amount'])
        if 'type' in record:
            record['type'] = record['type'].lower()

        serializer = TransactionImportRowSerializer(data=record)
        if serializer.is_valid():
            rows.append(dict(serializer.validated_data))
            continue

        for field, messages in serializer.errors.items():
            for message in messages:
                errors.append({
                    'row': reader.line_num,
                    'field': field,
                    'message': str(message),
                })

    return rows, errors


def bulk_create_transactions(*, account, user, content: str) -> List[Transaction]:
    """
    Create every transaction in a CSV upload, or none of them.

    Args:
        account: Account the transactions belong to
        user: Uploading user (recorded as created_by)
        content: Raw CSV text

    Returns:
        List of created Transaction instances

    Raises:
        BulkUploadError: If any row is invalid or the file has no rows
    """
    rows, errors = parse_transactions_csv(content)
    if errors:
        raise BulkUploadError(errors)
    if not rows:
        raise BulkUploadError([
            {'row': 1, 'field': 'file', 'message': 'No transactions found in file'}
        ])

    with transaction.atomic():
        created = Transaction.objects.bulk_create([
            Transaction(account=account, created_by=user, **row)
            for row in rows
        ])

    logger.info("Imported %d transactions into account %s", len(created), account.id)
    return created
