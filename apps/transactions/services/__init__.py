"""
Transactions app services layer.

Bulk CSV import, per-account summaries and receipt storage.
"""

from .exceptions import (
    TransactionsServiceError,
    TransactionNotFoundError,
    BulkUploadError,
)

from .csv_import import (
    parse_transactions_csv,
    bulk_create_transactions,
)

from .transaction_management import (
    summarize_transactions,
    attach_receipt,
)


__all__ = [
    # Exceptions
    'TransactionsServiceError',
    'TransactionNotFoundError',
    'BulkUploadError',

    # CSV import
    'parse_transactions_csv',
    'bulk_create_transactions',

    # Queries and updates
    'summarize_transactions',
    'attach_receipt',
]
