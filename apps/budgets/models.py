from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Sum
from decimal import Decimal
import uuid


class RecurringType(models.TextChoices):
    WEEKLY = 'weekly', 'Weekly'
    MONTHLY = 'monthly', 'Monthly'
    QUARTERLY = 'quarterly', 'Quarterly'
    YEARLY = 'yearly', 'Yearly'


class Budget(models.Model):
    """Spending limit for a period, optionally repeating."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='budgets'
    )
    name = models.CharField(max_length=200, validators=[MinLengthValidator(2)])
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    start_date = models.DateField()
    end_date = models.DateField()
    categories = models.ManyToManyField(
        'transactions.Category',
        blank=True,
        related_name='budgets'
    )

    # Recurrence
    is_recurring = models.BooleanField(default=False)
    recurring_type = models.CharField(
        max_length=10,
        choices=RecurringType.choices,
        blank=True
    )
    parent_budget = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='child_budgets'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'budgets'
        indexes = [
            models.Index(fields=['account', 'start_date'], name='budgets_account_start_idx'),
        ]
        ordering = ['-start_date', 'name']

    def __str__(self):
        return f"{self.name} ({self.start_date} - {self.end_date})"

    def get_spent(self):
        """Sum of transactions linked to this budget."""
        total = self.transactions.aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')
