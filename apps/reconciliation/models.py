# ==========================================
# apps/reconciliation/models.py
# ==========================================

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class StatementStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    RECONCILED = 'reconciled', 'Reconciled'
    DISCREPANCY = 'discrepancy', 'Discrepancy'


class BankTransactionType(models.TextChoices):
    DEBIT = 'debit', 'Debit'
    CREDIT = 'credit', 'Credit'


class MatchStatus(models.TextChoices):
    UNMATCHED = 'unmatched', 'Unmatched'
    MATCHED = 'matched', 'Matched'
    MANUAL_MATCH = 'manual_match', 'Manual match'
    IGNORED = 'ignored', 'Ignored'


class SessionStatus(models.TextChoices):
    IN_PROGRESS = 'in_progress', 'In progress'
    COMPLETED = 'completed', 'Completed'
    ABANDONED = 'abandoned', 'Abandoned'


class DiscrepancyType(models.TextChoices):
    MISSING_BANK_TRANSACTION = 'missing_bank_transaction', 'Missing bank transaction'
    MISSING_APP_TRANSACTION = 'missing_app_transaction', 'Missing app transaction'
    AMOUNT_MISMATCH = 'amount_mismatch', 'Amount mismatch'
    DATE_MISMATCH = 'date_mismatch', 'Date mismatch'


class BankStatement(models.Model):
    """An imported bank statement for one period."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='bank_statements'
    )
    statement_date = models.DateField()
    opening_balance = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal('0.00'))
    closing_balance = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal('0.00'))
    period_start = models.DateField()
    period_end = models.DateField()
    file_name = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=20,
        choices=StatementStatus.choices,
        default=StatementStatus.PENDING
    )
    reconciled_at = models.DateTimeField(null=True, blank=True)
    reconciled_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reconciled_statements'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bank_statements'
        ordering = ['-statement_date', '-created_at']
        indexes = [
            models.Index(fields=['account', 'statement_date'], name='statements_account_date_idx'),
        ]

    def __str__(self):
        return f"Statement {self.period_start} - {self.period_end}"


class BankTransaction(models.Model):
    """One line of a bank statement."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    statement = models.ForeignKey(
        BankStatement,
        on_delete=models.CASCADE,
        related_name='bank_transactions'
    )
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='bank_transactions'
    )
    transaction_date = models.DateField()
    description = models.CharField(max_length=255)
    # Always positive; direction is in transaction_type
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    transaction_type = models.CharField(max_length=10, choices=BankTransactionType.choices)
    reference_number = models.CharField(max_length=100, blank=True)
    balance_after = models.DecimalField(max_digits=16, decimal_places=2, null=True, blank=True)
    category_suggested = models.CharField(max_length=100, blank=True)

    matched_transaction = models.ForeignKey(
        'transactions.Transaction',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bank_matches'
    )
    match_confidence = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))]
    )
    match_status = models.CharField(
        max_length=20,
        choices=MatchStatus.choices,
        default=MatchStatus.UNMATCHED
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bank_transactions'
        ordering = ['transaction_date', 'created_at']
        indexes = [
            models.Index(fields=['statement', 'match_status'], name='bank_txn_statement_status_idx'),
            models.Index(fields=['account', 'transaction_date'], name='bank_txn_account_date_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_date} {self.description} {self.amount}"

    @property
    def is_matched(self):
        return self.match_status in (MatchStatus.MATCHED, MatchStatus.MANUAL_MATCH)


class ReconciliationSession(models.Model):
    """A reconciliation pass over one statement."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    statement = models.ForeignKey(
        BankStatement,
        on_delete=models.CASCADE,
        related_name='sessions'
    )
    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='reconciliation_sessions'
    )
    status = models.CharField(
        max_length=20,
        choices=SessionStatus.choices,
        default=SessionStatus.IN_PROGRESS
    )
    total_transactions = models.PositiveIntegerField(default=0)
    matched_transactions = models.PositiveIntegerField(default=0)
    unmatched_transactions = models.PositiveIntegerField(default=0)
    discrepancy_amount = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reconciliation_sessions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'reconciliation_sessions'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['statement'],
                condition=models.Q(status='in_progress'),
                name='one_open_session_per_statement',
            ),
        ]

    def __str__(self):
        return f"Session {self.id} ({self.status})"


class ReconciliationDiscrepancy(models.Model):
    """A difference found when completing a session."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(
        ReconciliationSession,
        on_delete=models.CASCADE,
        related_name='discrepancies'
    )
    discrepancy_type = models.CharField(max_length=30, choices=DiscrepancyType.choices)
    bank_transaction = models.ForeignKey(
        BankTransaction,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='discrepancies'
    )
    transaction = models.ForeignKey(
        'transactions.Transaction',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reconciliation_discrepancies'
    )
    expected_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    actual_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    description = models.CharField(max_length=255)
    is_resolved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reconciliation_discrepancies'
        ordering = ['created_at']
        verbose_name_plural = 'reconciliation discrepancies'

    def __str__(self):
        return f"{self.get_discrepancy_type_display()}: {self.description}"
