from django.core.validators import MinLengthValidator, MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class AssetType(models.TextChoices):
    CURRENT = 'current', 'Current'
    FIXED = 'fixed', 'Fixed'
    INTANGIBLE = 'intangible', 'Intangible'


class LiabilityType(models.TextChoices):
    CURRENT = 'current', 'Current'
    LONG_TERM = 'long_term', 'Long-term'


percentage_validators = [
    MinValueValidator(Decimal('0')),
    MaxValueValidator(Decimal('100')),
]


class Asset(models.Model):
    """Something the business owns."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='assets'
    )
    name = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    asset_type = models.CharField(max_length=20, choices=AssetType.choices)
    current_value = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    purchase_value = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    purchase_date = models.DateField(null=True, blank=True)
    depreciation_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=percentage_validators
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'assets'
        ordering = ['asset_type', 'name']
        indexes = [
            models.Index(fields=['account', 'asset_type'], name='assets_account_type_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_asset_type_display()})"


class Liability(models.Model):
    """Something the business owes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='liabilities'
    )
    name = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    liability_type = models.CharField(max_length=20, choices=LiabilityType.choices)
    current_balance = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    original_amount = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=percentage_validators
    )
    due_date = models.DateField(null=True, blank=True)
    minimum_payment = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'liabilities'
        ordering = ['liability_type', 'name']
        verbose_name_plural = 'liabilities'
        indexes = [
            models.Index(fields=['account', 'liability_type'], name='liabilities_account_type_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_liability_type_display()})"
