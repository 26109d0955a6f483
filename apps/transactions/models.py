from django.core.validators import MinLengthValidator, MinValueValidator, RegexValidator
from django.db import models
from decimal import Decimal
import uuid


class TransactionType(models.TextChoices):
    INCOME = 'income', 'Income'
    EXPENSE = 'expense', 'Expense'


hex_color_validator = RegexValidator(
    regex=r'^#([0-9A-Fa-f]{3}){1,2}$',
    message='Color must be a hex value like #FFF or #1A2B3C.'
)


class Category(models.Model):
    """Income or expense category, scoped to an account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='categories'
    )
    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    color = models.CharField(max_length=7, blank=True, validators=[hex_color_validator])
    icon = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'categories'
        unique_together = [['account', 'name', 'type']]
        ordering = ['type', 'name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return f"{self.name} ({self.type})"


class Transaction(models.Model):
    """A recorded income or expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='transactions'
    )

    date = models.DateField()
    description = models.CharField(max_length=255, validators=[MinLengthValidator(2)])
    category = models.CharField(max_length=100)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    payment_source = models.CharField(max_length=100)
    notes = models.TextField(blank=True)

    budget = models.ForeignKey(
        'budgets.Budget',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )

    # Tax tracking
    tax_deductible = models.BooleanField(default=False)
    tax_category = models.CharField(max_length=100, blank=True)
    business_purpose = models.TextField(blank=True)
    receipt = models.FileField(upload_to='receipts/%Y/%m/', blank=True)
    mileage = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )

    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['account', 'date'], name='transactions_account_date_idx'),
            models.Index(fields=['account', 'type'], name='transactions_account_type_idx'),
            models.Index(fields=['budget'], name='transactions_budget_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        sign = '+' if self.type == TransactionType.INCOME else '-'
        return f"{self.date} {sign}{self.amount} {self.description}"

    @property
    def signed_amount(self):
        """Amount with expenses negative."""
        if self.type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount
