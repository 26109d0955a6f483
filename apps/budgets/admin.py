from django.contrib import admin
from .models import Budget


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ['name', 'account', 'amount', 'start_date', 'end_date', 'is_recurring', 'recurring_type']
    list_filter = ['is_recurring', 'recurring_type']
    search_fields = ['name', 'account__name']
    date_hierarchy = 'start_date'
    filter_horizontal = ['categories']
    raw_id_fields = ['account', 'parent_budget']
