from django.apps import AppConfig


class BalanceSheetConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.balance_sheet'
    label = 'balance_sheet'
