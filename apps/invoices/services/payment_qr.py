"""
Payment QR codes for invoices.

The QR encodes plain-text bank transfer instructions that any phone camera
can read::

    Bank: First Bank
    Account name: Acme Ltd
    Account number: 0123456789
    Amount: NGN 1075.00
    Reference: INV-2024-0001
"""

from io import BytesIO

import qrcode

from .exceptions import MissingBankDetailsError
from .invoice_management import get_invoice_settings


class PaymentQRGenerator:
    """Build payment payloads and render them as PNG QR codes."""

    @staticmethod
    def generate_payload(*, bank_name, account_name, account_number, amount, currency, reference):
        """
        Plain-text payment instructions, one field per line.

        Args:
            bank_name (str): Receiving bank.
            account_name (str): Name on the receiving account.
            account_number (str): Receiving account number.
            amount (Decimal): Amount due.
            currency (str): ISO currency code.
            reference (str): Payment reference, usually the invoice number.
        """
        return "\n".join([
            f"Bank: {bank_name}",
            f"Account name: {account_name}",
            f"Account number: {account_number}",
            f"Amount: {currency} {amount:.2f}",
            f"Reference: {reference}",
        ])

    @staticmethod
    def generate_png(payload):
        """
        Render ``payload`` as a PNG and return the image bytes.

        Error correction level M keeps the code readable with minor damage.
        """
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()

    @staticmethod
    def generate_for_invoice(invoice):
        """
        Payload and PNG bytes for paying ``invoice``.

        Returns:
            tuple: (payload string, PNG bytes)

        Raises:
            MissingBankDetailsError: If the account has no bank details set.
        """
        invoice_settings = get_invoice_settings(account=invoice.account)
        if not invoice_settings.has_bank_details:
            raise MissingBankDetailsError(
                "Add bank name, account name and account number in invoice settings first"
            )

        payload = PaymentQRGenerator.generate_payload(
            bank_name=invoice_settings.bank_name,
            account_name=invoice_settings.account_name,
            account_number=invoice_settings.account_number,
            amount=invoice.total,
            currency=invoice.account.currency,
            reference=invoice.invoice_number,
        )
        return payload, PaymentQRGenerator.generate_png(payload)
