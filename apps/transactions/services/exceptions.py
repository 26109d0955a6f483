"""
Domain-specific exceptions for transactions app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class TransactionsServiceError(Exception):
    """Base exception for all transactions service errors."""
    pass


class TransactionNotFoundError(TransactionsServiceError):
    """Raised when a transaction does not exist in the account."""
    pass


class BulkUploadError(TransactionsServiceError):
    """
    Raised when a CSV upload has invalid rows.

    ``errors`` holds ``{'row', 'field', 'message'}`` dicts; row numbers count
    the header line, so the first data row is row 2.
    """

    def __init__(self, errors):
        self.errors = errors
        super().__init__(f"{len(errors)} error(s) in uploaded file")
