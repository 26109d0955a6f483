from django.contrib import admin
from .models import Client, Invoice, InvoiceItem, InvoiceSettings


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['amount']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'client', 'account', 'invoice_date', 'due_date', 'status', 'total']
    list_filter = ['status']
    search_fields = ['invoice_number', 'client__name', 'account__name']
    date_hierarchy = 'invoice_date'
    readonly_fields = ['subtotal', 'tax_amount', 'total', 'share_token', 'created_at', 'updated_at']
    raw_id_fields = ['account', 'client', 'transaction', 'created_by']
    inlines = [InvoiceItemInline]


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'account', 'city', 'country']
    search_fields = ['name', 'email', 'account__name']
    raw_id_fields = ['account']


@admin.register(InvoiceSettings)
class InvoiceSettingsAdmin(admin.ModelAdmin):
    list_display = ['account', 'business_name', 'invoice_prefix', 'bank_name']
    search_fields = ['business_name', 'account__name']
    raw_id_fields = ['account']
