"""Balance sheet totals."""

from decimal import Decimal

from django.db.models import Sum

from apps.balance_sheet.models import Asset, AssetType, Liability, LiabilityType

ZERO = Decimal('0.00')


def _totals_by(queryset, type_field, value_field, choices):
    rows = queryset.order_by().values(type_field).annotate(total=Sum(value_field))
    totals = {value: ZERO for value, _ in choices}
    for row in rows:
        totals[row[type_field]] = row['total'] or ZERO
    return totals


def balance_sheet_summary(*, account) -> dict:
    """
    Assets, liabilities and net worth for an account.

    Returns:
        dict with ``total_assets``, ``assets_by_type``, ``total_liabilities``,
        ``liabilities_by_type``, ``net_worth``, ``asset_count`` and
        ``liability_count``
    """
    assets = Asset.objects.filter(account=account)
    liabilities = Liability.objects.filter(account=account)

    assets_by_type = _totals_by(assets, 'asset_type', 'current_value', AssetType.choices)
    liabilities_by_type = _totals_by(
        liabilities, 'liability_type', 'current_balance', LiabilityType.choices
    )
    total_assets = sum(assets_by_type.values(), ZERO)
    total_liabilities = sum(liabilities_by_type.values(), ZERO)

    return {
        'total_assets': total_assets,
        'assets_by_type': assets_by_type,
        'total_liabilities': total_liabilities,
        'liabilities_by_type': liabilities_by_type,
        'net_worth': total_assets - total_liabilities,
        'asset_count': assets.count(),
        'liability_count': liabilities.count(),
    }
