from django.contrib import admin
from .models import BankStatement, BankTransaction, ReconciliationSession, ReconciliationDiscrepancy


class BankTransactionInline(admin.TabularInline):
    model = BankTransaction
    extra = 0
    fields = ['transaction_date', 'description', 'amount', 'transaction_type', 'match_status', 'match_confidence']
    readonly_fields = fields


@admin.register(BankStatement)
class BankStatementAdmin(admin.ModelAdmin):
    list_display = ['account', 'statement_date', 'period_start', 'period_end', 'closing_balance', 'status']
    list_filter = ['status']
    search_fields = ['account__name', 'file_name']
    raw_id_fields = ['account', 'reconciled_by']
    inlines = [BankTransactionInline]


class ReconciliationDiscrepancyInline(admin.TabularInline):
    model = ReconciliationDiscrepancy
    extra = 0
    raw_id_fields = ['bank_transaction', 'transaction']


@admin.register(ReconciliationSession)
class ReconciliationSessionAdmin(admin.ModelAdmin):
    list_display = ['statement', 'account', 'status', 'matched_transactions', 'unmatched_transactions', 'discrepancy_amount', 'created_at']
    list_filter = ['status']
    raw_id_fields = ['statement', 'account', 'created_by']
    inlines = [ReconciliationDiscrepancyInline]
