"""
Domain-specific exceptions for invoices app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class InvoicesServiceError(Exception):
    """Base exception for all invoices service errors."""
    pass


class InvoiceNotFoundError(InvoicesServiceError):
    """Raised when an invoice does not exist in the account."""
    pass


class ClientNotFoundError(InvoicesServiceError):
    """Raised when a client does not exist in the account."""
    pass


class InvalidInvoiceError(InvoicesServiceError):
    """Raised when invoice data breaks a business rule (dates, items)."""
    pass


class InvalidStatusTransitionError(InvoicesServiceError):
    """Raised when a paid or cancelled invoice would change status."""
    pass


class InvoiceAlreadyPaidError(InvoicesServiceError):
    """Raised when marking an already paid invoice as paid."""
    pass


class MissingRecipientError(InvoicesServiceError):
    """Raised when an invoice email has nowhere to go."""
    pass


class MissingBankDetailsError(InvoicesServiceError):
    """Raised when a payment QR is requested without bank details."""
    pass


class InvoiceEmailError(InvoicesServiceError):
    """Raised when the mail server refuses an invoice email."""
    pass
