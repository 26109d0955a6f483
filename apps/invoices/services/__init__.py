"""
Invoices services.

Business logic for clients, invoices, numbering, emailing and payment QR codes.
"""

from .calculations import (
    calculate_line_amount,
    calculate_totals,
    days_until_due,
    is_overdue,
    due_status_text,
)
from .numbering import (
    generate_invoice_number,
    preview_invoice_number,
)
from .invoice_management import (
    get_invoice_settings,
    create_invoice,
    update_invoice,
    update_invoice_status,
    mark_invoice_paid,
    mark_overdue_invoices,
)
from .invoice_email import (
    send_invoice_email,
    invoice_public_url,
)
from .payment_qr import PaymentQRGenerator
from .invoice_pdf import InvoicePDFRenderer
from .exceptions import (
    InvoicesServiceError,
    InvoiceNotFoundError,
    ClientNotFoundError,
    InvalidInvoiceError,
    InvalidStatusTransitionError,
    InvoiceAlreadyPaidError,
    MissingRecipientError,
    MissingBankDetailsError,
    InvoiceEmailError,
)

__all__ = [
    # Calculations
    'calculate_line_amount',
    'calculate_totals',
    'days_until_due',
    'is_overdue',
    'due_status_text',
    # Numbering
    'generate_invoice_number',
    'preview_invoice_number',
    # Lifecycle
    'get_invoice_settings',
    'create_invoice',
    'update_invoice',
    'update_invoice_status',
    'mark_invoice_paid',
    'mark_overdue_invoices',
    # Email
    'send_invoice_email',
    'invoice_public_url',
    # QR and PDF
    'PaymentQRGenerator',
    'InvoicePDFRenderer',
    # Exceptions
    'InvoicesServiceError',
    'InvoiceNotFoundError',
    'ClientNotFoundError',
    'InvalidInvoiceError',
    'InvalidStatusTransitionError',
    'InvoiceAlreadyPaidError',
    'MissingRecipientError',
    'MissingBankDetailsError',
    'InvoiceEmailError',
]
