from django.contrib import admin
from .models import Asset, Liability


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ['name', 'account', 'asset_type', 'current_value', 'purchase_date']
    list_filter = ['asset_type']
    search_fields = ['name', 'category', 'account__name']
    raw_id_fields = ['account']


@admin.register(Liability)
class LiabilityAdmin(admin.ModelAdmin):
    list_display = ['name', 'account', 'liability_type', 'current_balance', 'due_date']
    list_filter = ['liability_type']
    search_fields = ['name', 'category', 'account__name']
    raw_id_fields = ['account']
