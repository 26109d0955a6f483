from django.contrib import admin
from .models import TaxSettings


@admin.register(TaxSettings)
class TaxSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'business_type', 'is_professional_service', 'vat_registered', 'tax_year']
    list_filter = ['business_type', 'vat_registered', 'is_professional_service']
    search_fields = ['user__email', 'tax_id']
    raw_id_fields = ['user']
