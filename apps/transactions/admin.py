from django.contrib import admin
from django.utils.html import format_html
from .models import Category, Transaction, TransactionType


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'account', 'color_swatch']
    list_filter = ['type']
    search_fields = ['name', 'account__name']

    def color_swatch(self, obj):
        if not obj.color:
            return '-'
        return format_html(
            '<span style="display: inline-block; width: 14px; height: 14px; '
            'border-radius: 3px; background: {};"></span>',
            obj.color
        )
    color_swatch.short_description = 'Color'


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin interface for recorded transactions."""

    list_display = [
        'date',
        'description',
        'category',
        'signed_amount_display',
        'payment_source',
        'account',
        'tax_deductible',
    ]
    list_filter = ['type', 'tax_deductible', 'date']
    search_fields = ['description', 'category', 'notes', 'account__name']
    date_hierarchy = 'date'
    raw_id_fields = ['account', 'budget', 'created_by']
    readonly_fields = ['created_at', 'updated_at']

    def signed_amount_display(self, obj):
        color = '#2E7D32' if obj.type == TransactionType.INCOME else '#C62828'
        return format_html('<span style="color: {};">{}</span>', color, obj.signed_amount)
    signed_amount_display.short_description = 'Amount'
    signed_amount_display.admin_order_field = 'amount'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('account')
