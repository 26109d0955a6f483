from rest_framework import serializers

from apps.transactions.serializers import TransactionSerializer
from .models import (
    BankStatement,
    BankTransaction,
    MatchStatus,
    ReconciliationDiscrepancy,
    ReconciliationSession,
)


# =============================================================================
# Input Serializers
# =============================================================================

class StatementImportSerializer(serializers.Serializer):
    """
    Statement CSV plus optional metadata.

    Metadata fields override values found in the file.
    """

    file = serializers.FileField(required=False)
    content = serializers.CharField(required=False, trim_whitespace=False)
    statement_date = serializers.DateField(required=False)
    period_start = serializers.DateField(required=False)
    period_end = serializers.DateField(required=False)
    opening_balance = serializers.DecimalField(max_digits=16, decimal_places=2, required=False)
    closing_balance = serializers.DecimalField(max_digits=16, decimal_places=2, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('file') and not attrs.get('content'):
            raise serializers.ValidationError('Provide a statement file or statement content.')
        if attrs.get('period_start') and attrs.get('period_end') and attrs['period_start'] > attrs['period_end']:
            raise serializers.ValidationError({
                'period_end': 'Period end must be after period start'
            })
        return attrs


class BankTransactionFilterSerializer(serializers.Serializer):
    match_status = serializers.ChoiceField(choices=MatchStatus.choices, required=False)


class ManualMatchSerializer(serializers.Serializer):
    transaction = serializers.UUIDField()


class StartSessionSerializer(serializers.Serializer):
    statement = serializers.UUIDField()


class CompleteSessionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class BankStatementSerializer(serializers.ModelSerializer):
    transaction_count = serializers.IntegerField(source='bank_transactions.count', read_only=True)
    reconciled_by_name = serializers.SerializerMethodField()

    class Meta:
        model = BankStatement
        fields = [
            'id',
            'statement_date',
            'opening_balance',
            'closing_balance',
            'period_start',
            'period_end',
            'file_name',
            'status',
            'reconciled_at',
            'reconciled_by',
            'reconciled_by_name',
            'notes',
            'transaction_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_reconciled_by_name(self, obj):
        if obj.reconciled_by is None:
            return None
        return obj.reconciled_by.get_display_name()


class BankTransactionSerializer(serializers.ModelSerializer):
    matched_transaction_detail = TransactionSerializer(source='matched_transaction', read_only=True)

    class Meta:
        model = BankTransaction
        fields = [
            'id',
            'statement',
            'transaction_date',
            'description',
            'amount',
            'transaction_type',
            'reference_number',
            'balance_after',
            'category_suggested',
            'matched_transaction',
            'matched_transaction_detail',
            'match_confidence',
            'match_status',
        ]
        read_only_fields = fields


class ReconciliationSummarySerializer(serializers.Serializer):
    total_bank_transactions = serializers.IntegerField()
    matched_transactions = serializers.IntegerField()
    unmatched_transactions = serializers.IntegerField()
    ignored_transactions = serializers.IntegerField()
    bank_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    app_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    discrepancy_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    has_discrepancy = serializers.BooleanField()


class ReconciliationDiscrepancySerializer(serializers.ModelSerializer):

    class Meta:
        model = ReconciliationDiscrepancy
        fields = [
            'id',
            'discrepancy_type',
            'bank_transaction',
            'transaction',
            'expected_amount',
            'actual_amount',
            'description',
            'is_resolved',
            'created_at',
        ]
        read_only_fields = fields


class ReconciliationSessionSerializer(serializers.ModelSerializer):
    discrepancies = ReconciliationDiscrepancySerializer(many=True, read_only=True)

    class Meta:
        model = ReconciliationSession
        fields = [
            'id',
            'statement',
            'status',
            'total_transactions',
            'matched_transactions',
            'unmatched_transactions',
            'discrepancy_amount',
            'notes',
            'created_by',
            'created_at',
            'completed_at',
            'discrepancies',
        ]
        read_only_fields = fields
