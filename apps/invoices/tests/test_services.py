"""
Tests for invoices services.

These tests verify the business logic in the services layer,
independent of the HTTP layer.
"""

from datetime import date
from decimal import Decimal
from smtplib import SMTPException

import pytest
from django.core import mail
from django.core.mail.backends.locmem import EmailBackend
from django.core.management import call_command
from reportlab.platypus import Paragraph

from apps.invoices.models import Invoice, InvoiceStatus
from apps.invoices.services import (
    calculate_line_amount,
    calculate_totals,
    create_invoice,
    due_status_text,
    generate_invoice_number,
    get_invoice_settings,
    invoice_public_url,
    is_overdue,
    mark_invoice_paid,
    mark_overdue_invoices,
    preview_invoice_number,
    send_invoice_email,
    update_invoice,
    update_invoice_status,
    InvoicePDFRenderer,
    PaymentQRGenerator,
    ClientNotFoundError,
    InvalidInvoiceError,
    InvalidStatusTransitionError,
    InvoiceAlreadyPaidError,
    InvoiceEmailError,
    MissingBankDetailsError,
    MissingRecipientError,
)
from apps.transactions.models import Category, Transaction


# =============================================================================
# Calculation Tests
# =============================================================================

class TestCalculations:

    def test_line_amount_rounds_half_up(self):
        assert calculate_line_amount(Decimal('3'), Decimal('0.125')) == Decimal('0.38')

    def test_line_amount_missing_values(self):
        assert calculate_line_amount(None, '10') == Decimal('0.00')

    def test_totals(self):
        items = [
            {'quantity': Decimal('2'), 'unit_price': Decimal('500.00')},
            {'quantity': '1', 'unit_price': '0.50'},
        ]
        totals = calculate_totals(items, Decimal('7.5'))

        assert totals == {
            'subtotal': Decimal('1000.50'),
            'tax_amount': Decimal('75.04'),
            'total': Decimal('1075.54'),
        }

    def test_totals_no_items(self):
        totals = calculate_totals([], 10)

        assert totals['total'] == Decimal('0.00')

    @pytest.mark.parametrize('due,status,expected', [
        (date(2024, 3, 10), 'sent', '5 days overdue'),
        (date(2024, 3, 14), 'sent', '1 day overdue'),
        (date(2024, 3, 15), 'sent', 'Due today'),
        (date(2024, 3, 16), 'draft', 'Due tomorrow'),
        (date(2024, 3, 25), 'draft', 'Due in 10 days'),
        (date(2024, 3, 1), 'paid', 'Paid'),
        (date(2024, 3, 1), 'cancelled', 'Cancelled'),
    ])
    def test_due_status_text(self, due, status, expected):
        assert due_status_text(due, today=date(2024, 3, 15), status=status) == expected

    def test_is_overdue_ignores_final(self):
        paid = Invoice(status=InvoiceStatus.PAID, due_date=date(2024, 1, 1))
        sent = Invoice(status=InvoiceStatus.SENT, due_date=date(2024, 1, 1))

        assert is_overdue(paid, today=date(2024, 2, 1)) is False
        assert is_overdue(sent, today=date(2024, 2, 1)) is True


# =============================================================================
# Numbering Tests
# =============================================================================

@pytest.mark.django_db
class TestNumbering:

    def test_sequential_per_year(self, account):
        assert generate_invoice_number(account=account, year=2024) == 'INV-2024-0001'
        assert generate_invoice_number(account=account, year=2024) == 'INV-2024-0002'
        assert generate_invoice_number(account=account, year=2025) == 'INV-2025-0001'

    def test_independent_per_account(self, account, other_account):
        generate_invoice_number(account=account, year=2024)

        assert generate_invoice_number(account=other_account, year=2024) == 'INV-2024-0001'

    def test_custom_prefix(self, account):
        invoice_settings = get_invoice_settings(account=account)
        invoice_settings.invoice_prefix = 'ACME'
        invoice_settings.save()

        assert generate_invoice_number(account=account, year=2024) == 'ACME-2024-0001'

    def test_preview_does_not_reserve(self, account):
        assert preview_invoice_number(account=account, year=2024) == 'INV-2024-0001'
        assert preview_invoice_number(account=account, year=2024) == 'INV-2024-0001'
        assert generate_invoice_number(account=account, year=2024) == 'INV-2024-0001'


# =============================================================================
# Create / Update Tests
# =============================================================================

@pytest.mark.django_db
class TestCreateInvoice:

    def test_totals_and_items(self, invoice):
        assert invoice.invoice_number == 'INV-2024-0001'
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.subtotal == Decimal('1000.50')
        assert invoice.tax_amount == Decimal('75.04')
        assert invoice.total == Decimal('1075.54')
        assert [item.position for item in invoice.items.all()] == [0, 1]
        assert invoice.share_token

    def test_defaults_from_settings(self, account, user, billing_client, invoice_items):
        invoice_settings = get_invoice_settings(account=account)
        invoice_settings.default_payment_terms = 'Net 30'
        invoice_settings.default_notes = 'Thank you!'
        invoice_settings.save()

        invoice = create_invoice(
            account=account,
            user=user,
            client=billing_client,
            invoice_date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
            items=invoice_items,
        )

        assert invoice.terms == 'Net 30'
        assert invoice.notes == 'Thank you!'

    def test_foreign_client(self, account, user, foreign_client, invoice_items):
        with pytest.raises(ClientNotFoundError):
            create_invoice(
                account=account,
                user=user,
                client=foreign_client,
                invoice_date=date(2024, 3, 1),
                due_date=date(2024, 3, 31),
                items=invoice_items,
            )

    def test_due_before_issue(self, account, user, billing_client, invoice_items):
        with pytest.raises(InvalidInvoiceError):
            create_invoice(
                account=account,
                user=user,
                client=billing_client,
                invoice_date=date(2024, 3, 10),
                due_date=date(2024, 3, 1),
                items=invoice_items,
            )

    def test_needs_items(self, account, user, billing_client):
        with pytest.raises(InvalidInvoiceError):
            create_invoice(
                account=account,
                user=user,
                client=billing_client,
                invoice_date=date(2024, 3, 1),
                due_date=date(2024, 3, 31),
                items=[],
            )

    def test_cannot_create_paid(self, account, user, billing_client, invoice_items):
        with pytest.raises(InvalidInvoiceError):
            create_invoice(
                account=account,
                user=user,
                client=billing_client,
                invoice_date=date(2024, 3, 1),
                due_date=date(2024, 3, 31),
                items=invoice_items,
                status=InvoiceStatus.PAID,
            )


@pytest.mark.django_db
class TestUpdateInvoice:

    def test_new_tax_rate_recomputes(self, invoice, account):
        updated = update_invoice(invoice_id=invoice.id, account=account, tax_rate=Decimal('0'))

        assert updated.tax_amount == Decimal('0.00')
        assert updated.total == Decimal('1000.50')
        assert updated.items.count() == 2

    def test_replace_items(self, invoice, account):
        updated = update_invoice(
            invoice_id=invoice.id,
            account=account,
            items=[{'description': 'Retainer', 'quantity': Decimal('1'), 'unit_price': Decimal('200.00')}],
        )

        assert updated.subtotal == Decimal('200.00')
        assert updated.total == Decimal('215.00')
        assert list(updated.items.values_list('description', flat=True)) == ['Retainer']

    def test_paid_invoice_locked(self, invoice, account, user):
        mark_invoice_paid(invoice_id=invoice.id, account=account, user=user)

        with pytest.raises(InvalidInvoiceError):
            update_invoice(invoice_id=invoice.id, account=account, notes='changed')


# =============================================================================
# Payment and Status Tests
# =============================================================================

@pytest.mark.django_db
class TestMarkInvoicePaid:

    def test_creates_income_transaction(self, invoice, account, user):
        paid = mark_invoice_paid(
            invoice_id=invoice.id,
            account=account,
            user=user,
            payment_source='Cash',
            paid_date=date(2024, 3, 20),
        )

        assert paid.status == InvoiceStatus.PAID
        assert paid.paid_date == date(2024, 3, 20)
        txn = paid.transaction
        assert txn.type == 'income'
        assert txn.amount == Decimal('1075.54')
        assert txn.category == 'Invoice Payment'
        assert txn.payment_source == 'Cash'
        assert txn.description == 'Invoice INV-2024-0001 - Acme Stores'
        assert 'Subtotal: 1000.50, Tax: 75.04' in txn.notes
        assert Category.objects.filter(account=account, name='Invoice Payment', type='income').exists()

    def test_twice(self, invoice, account, user):
        mark_invoice_paid(invoice_id=invoice.id, account=account, user=user)

        with pytest.raises(InvoiceAlreadyPaidError):
            mark_invoice_paid(invoice_id=invoice.id, account=account, user=user)
        assert Transaction.objects.filter(account=account).count() == 1

    def test_cancelled(self, invoice, account, user):
        update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='cancelled')

        with pytest.raises(InvalidStatusTransitionError):
            mark_invoice_paid(invoice_id=invoice.id, account=account, user=user)


@pytest.mark.django_db
class TestUpdateInvoiceStatus:

    def test_sent_stamps_sent_at(self, invoice, account, user):
        updated = update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='sent')

        assert updated.status == InvoiceStatus.SENT
        assert updated.sent_at is not None

    def test_paid_goes_through_payment(self, invoice, account, user):
        updated = update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='paid')

        assert updated.transaction is not None

    def test_final_status_is_final(self, invoice, account, user):
        update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='cancelled')

        with pytest.raises(InvalidStatusTransitionError):
            update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='draft')

    def test_same_status_is_noop(self, invoice, account, user):
        updated = update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='draft')

        assert updated.status == InvoiceStatus.DRAFT


@pytest.mark.django_db
class TestMarkOverdue:

    def test_only_sent_past_due(self, invoice, account, user):
        update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='sent')

        assert mark_overdue_invoices(today=date(2024, 3, 31)) == 0
        assert mark_overdue_invoices(today=date(2024, 4, 1)) == 1
        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.OVERDUE

    def test_draft_not_flagged(self, invoice):
        assert mark_overdue_invoices(today=date(2025, 1, 1)) == 0

    def test_command_dry_run(self, invoice, account, user, capsys):
        update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='sent')

        call_command('mark_overdue_invoices', '--dry-run')

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.SENT
        assert 'INV-2024-0001' in capsys.readouterr().out

    def test_command(self, invoice, account, user):
        update_invoice_status(invoice_id=invoice.id, account=account, user=user, status='sent')

        call_command('mark_overdue_invoices')

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.OVERDUE


# =============================================================================
# Email and QR Tests
# =============================================================================

@pytest.mark.django_db
class TestSendInvoiceEmail:

    def test_sends_and_marks_sent(self, invoice, account, bank_details):
        sent = send_invoice_email(invoice_id=invoice.id, account=account, message='Thanks for your business')

        assert sent.status == InvoiceStatus.SENT
        assert sent.sent_at is not None
        assert len(mail.outbox) == 1
        email = mail.outbox[0]
        assert email.to == ['accounts@acme.example.com']
        assert email.reply_to == ['hello@studio.example.com']
        assert email.subject == 'Invoice INV-2024-0001 from Test Studio'
        assert 'Thanks for your business' in email.body
        assert invoice_public_url(invoice) in email.body

    def test_recipient_override(self, invoice, account):
        send_invoice_email(invoice_id=invoice.id, account=account, recipient='boss@acme.example.com')

        assert mail.outbox[0].to == ['boss@acme.example.com']

    def test_no_recipient(self, invoice, account, billing_client):
        billing_client.email = ''
        billing_client.save()

        with pytest.raises(MissingRecipientError):
            send_invoice_email(invoice_id=invoice.id, account=account)
        assert len(mail.outbox) == 0

    def test_mail_server_failure(self, invoice, account, monkeypatch):
        """A refused email leaves the invoice unsent."""
        def refuse(self, messages):
            raise SMTPException('relay down')
        monkeypatch.setattr(EmailBackend, 'send_messages', refuse)

        with pytest.raises(InvoiceEmailError):
            send_invoice_email(invoice_id=invoice.id, account=account)

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.sent_at is None


@pytest.mark.django_db
class TestPaymentQR:

    def test_payload(self, invoice, bank_details):
        payload, png = PaymentQRGenerator.generate_for_invoice(invoice)

        assert payload.splitlines() == [
            'Bank: First Bank',
            'Account name: Test Studio Ltd',
            'Account number: 0123456789',
            'Amount: NGN 1075.54',
            'Reference: INV-2024-0001',
        ]
        assert png.startswith(b'\x89PNG')

    def test_missing_bank_details(self, invoice):
        with pytest.raises(MissingBankDetailsError):
            PaymentQRGenerator.generate_for_invoice(invoice)


@pytest.mark.django_db
class TestInvoicePDF:

    @staticmethod
    def _headings(story):
        return [flowable.getPlainText() for flowable in story if isinstance(flowable, Paragraph)]

    def test_renders_pdf(self, invoice, bank_details):
        content = InvoicePDFRenderer.render(invoice)

        assert content.startswith(b'%PDF')

    def test_payment_section_with_bank_details(self, invoice, bank_details):
        invoice.notes = 'Thanks for your business'
        story = InvoicePDFRenderer.build_story(invoice, bank_details)

        headings = self._headings(story)
        assert headings[0] == 'INVOICE'
        assert 'Notes' in headings
        assert 'How to pay' in headings
        assert 'Terms' not in headings

    def test_no_payment_section_without_bank_details(self, invoice, account):
        story = InvoicePDFRenderer.build_story(invoice, get_invoice_settings(account=account))

        assert 'How to pay' not in self._headings(story)
