from django.contrib import admin
from django.db.models import Count
from .models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'currency', 'transaction_count', 'created_at']
    list_filter = ['currency', 'created_at']
    search_fields = ['name', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['owner']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('owner').annotate(_transaction_count=Count('transactions'))

    def transaction_count(self, obj):
        return obj._transaction_count
    transaction_count.short_description = 'Transactions'
    transaction_count.admin_order_field = '_transaction_count'
