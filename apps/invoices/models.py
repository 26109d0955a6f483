# ==========================================
# apps/invoices/models.py
# ==========================================

from django.core.validators import MinLengthValidator, MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import secrets
import uuid


def generate_share_token():
    return secrets.token_urlsafe(24)


class InvoiceStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SENT = 'sent', 'Sent'
    PAID = 'paid', 'Paid'
    OVERDUE = 'overdue', 'Overdue'
    CANCELLED = 'cancelled', 'Cancelled'


class Client(models.Model):
    """Customer that invoices are addressed to."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='clients'
    )
    name = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='Nigeria')
    tax_id = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        ordering = ['name']

    def __str__(self):
        return self.name


class InvoiceSettings(models.Model):
    """Business details printed on every invoice of an account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='invoice_settings'
    )
    business_name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='Nigeria')
    tax_id = models.CharField(max_length=50, blank=True)
    website = models.URLField(blank=True)
    logo_url = models.URLField(blank=True)
    default_payment_terms = models.TextField(blank=True)
    default_notes = models.TextField(blank=True)
    invoice_prefix = models.CharField(max_length=10, default='INV')

    # Bank details for payment instructions and QR codes
    bank_name = models.CharField(max_length=100, blank=True)
    account_name = models.CharField(max_length=200, blank=True)
    account_number = models.CharField(max_length=30, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoice_settings'
        verbose_name_plural = 'invoice settings'

    def __str__(self):
        return self.business_name or f"Settings for {self.account}"

    @property
    def has_bank_details(self):
        return bool(self.bank_name and self.account_name and self.account_number)


class InvoiceSequence(models.Model):
    """Last issued invoice number per account and year."""

    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='invoice_sequences'
    )
    year = models.PositiveIntegerField()
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'invoice_sequences'
        unique_together = [['account', 'year']]

    def __str__(self):
        return f"{self.account} {self.year}: {self.last_number}"


class Invoice(models.Model):
    """Invoice issued to a client."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='invoices'
    )
    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name='invoices'
    )

    invoice_number = models.CharField(max_length=50)
    invoice_date = models.DateField()
    due_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT
    )

    # Totals (always derived from items and tax_rate)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    notes = models.TextField(blank=True)
    terms = models.TextField(blank=True)

    # Payment tracking
    paid_date = models.DateField(null=True, blank=True)
    transaction = models.ForeignKey(
        'transactions.Transaction',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )
    sent_at = models.DateTimeField(null=True, blank=True)

    # Public link
    share_token = models.CharField(
        max_length=64,
        unique=True,
        default=generate_share_token,
        editable=False
    )

    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        unique_together = [['account', 'invoice_number']]
        indexes = [
            models.Index(fields=['account', 'status'], name='invoices_account_status_idx'),
            models.Index(fields=['account', 'due_date'], name='invoices_account_due_idx'),
        ]
        ordering = ['-invoice_date', '-created_at']

    def __str__(self):
        return f"{self.invoice_number} - {self.client.name}"

    @property
    def is_final(self):
        return self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED)


class InvoiceItem(models.Model):
    """Line item: quantity x unit price."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name='items'
    )
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    unit_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['position']

    def __str__(self):
        return f"{self.description} x{self.quantity}"
