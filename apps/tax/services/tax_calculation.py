"""
Nigerian tax estimates.

Individuals pay personal income tax on progressive bands after the
Consolidated Relief Allowance (CRA). Companies pay company income tax by
turnover tier plus tertiary education tax and, for large turnover, the IT
levy. Small companies (turnover up to 50M, not a professional service)
are exempt from income and education tax.

Figures are estimates from recorded transactions, not a filing.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.db.models import Count, Sum

from apps.invoices.models import Invoice, InvoiceStatus
from apps.tax.models import BusinessType, TaxSettings
from apps.transactions.models import Transaction, TransactionType

ZERO = Decimal('0.00')

SMALL_BUSINESS_TURNOVER = Decimal('50000000')
MEDIUM_BUSINESS_TURNOVER = Decimal('100000000')

CRA_FLAT = Decimal('200000')
CRA_MIN_RATE = Decimal('0.01')
CRA_RATE = Decimal('0.20')

# (band width, rate); None width is the remainder
PERSONAL_TAX_BANDS = [
    (Decimal('300000'), Decimal('0.07')),
    (Decimal('300000'), Decimal('0.11')),
    (Decimal('500000'), Decimal('0.15')),
    (Decimal('500000'), Decimal('0.19')),
    (Decimal('1600000'), Decimal('0.21')),
    (None, Decimal('0.24')),
]

MEDIUM_COMPANY_RATE = Decimal('0.20')
LARGE_COMPANY_RATE = Decimal('0.30')
EDUCATION_TAX_RATE = Decimal('0.03')
IT_LEVY_RATE = Decimal('0.01')


def _cents(value) -> Decimal:
    return Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def get_tax_settings(*, user) -> TaxSettings:
    """Return the user's tax settings, creating defaults on first use."""
    tax_settings, _ = TaxSettings.objects.get_or_create(user=user)
    return tax_settings


def consolidated_relief_allowance(taxable_income: Decimal) -> Decimal:
    return max(taxable_income * CRA_MIN_RATE, CRA_FLAT + taxable_income * CRA_RATE)


def personal_income_tax(chargeable_income: Decimal) -> Decimal:
    """Tax on ``chargeable_income`` across the progressive bands."""
    remaining = max(chargeable_income, ZERO)
    tax = ZERO
    for width, rate in PERSONAL_TAX_BANDS:
        portion = remaining if width is None else min(remaining, width)
        tax += portion * rate
        remaining -= portion
        if remaining <= 0:
            break
    return tax


def qualifies_as_small_business(tax_settings: TaxSettings, turnover: Decimal) -> bool:
    return (
        tax_settings.is_company
        and turnover <= SMALL_BUSINESS_TURNOVER
        and not tax_settings.is_professional_service
    )


def _year_total(queryset) -> Decimal:
    return queryset.aggregate(total=Sum('amount'))['total'] or ZERO


def calculate_tax_summary(*, account, tax_settings: TaxSettings, year: int) -> dict:
    """
    Estimated income tax and VAT for ``year``.

    Args:
        account: Account whose transactions and invoices are taxed
        tax_settings: The owner's tax settings
        year: Calendar year

    Returns:
        dict of turnover, deductions, taxable income, each tax and VAT figure
    """
    year_transactions = Transaction.objects.filter(account=account, date__year=year)
    turnover = _year_total(year_transactions.filter(type=TransactionType.INCOME))
    deductible = _year_total(
        year_transactions.filter(type=TransactionType.EXPENSE, tax_deductible=True)
    )
    taxable_income = max(ZERO, turnover - deductible)
    qualifies = qualifies_as_small_business(tax_settings, turnover)

    cra = ZERO
    chargeable_income = taxable_income
    income_tax = ZERO
    education_tax = ZERO
    it_levy = ZERO

    if tax_settings.business_type == BusinessType.INDIVIDUAL:
        cra = consolidated_relief_allowance(taxable_income)
        chargeable_income = max(ZERO, taxable_income - cra)
        income_tax = personal_income_tax(chargeable_income)
    elif tax_settings.is_company:
        if qualifies:
            income_tax = ZERO
        elif turnover <= MEDIUM_BUSINESS_TURNOVER:
            income_tax = taxable_income * MEDIUM_COMPANY_RATE
        else:
            income_tax = taxable_income * LARGE_COMPANY_RATE

        if not qualifies:
            education_tax = taxable_income * EDUCATION_TAX_RATE
        if turnover > MEDIUM_BUSINESS_TURNOVER:
            it_levy = taxable_income * IT_LEVY_RATE

    total_tax = income_tax + education_tax + it_levy

    vat_collected = (
        Invoice.objects
        .filter(account=account, status=InvoiceStatus.PAID, paid_date__year=year)
        .aggregate(total=Sum('tax_amount'))['total']
    ) or ZERO
    vat_paid = ZERO

    effective_rate = total_tax / taxable_income * 100 if taxable_income > 0 else ZERO

    return {
        'year': year,
        'business_type': tax_settings.business_type,
        'turnover': _cents(turnover),
        'deductible_expenses': _cents(deductible),
        'taxable_income': _cents(taxable_income),
        'qualifies_small_business': qualifies,
        'consolidated_relief_allowance': _cents(cra),
        'chargeable_income': _cents(chargeable_income),
        'income_tax': _cents(income_tax),
        'education_tax': _cents(education_tax),
        'it_levy': _cents(it_levy),
        'total_tax': _cents(total_tax),
        'effective_rate': _cents(effective_rate),
        'vat_registered': tax_settings.vat_registered,
        'vat_collected': _cents(vat_collected),
        'vat_paid': vat_paid,
        'net_vat': _cents(vat_collected - vat_paid),
    }


def deductible_expenses(*, account, year: int, tax_category: Optional[str] = None) -> dict:
    """
    Tax-deductible expenses for ``year`` grouped by tax category.

    Returns:
        dict with ``total``, ``count`` and ``by_category`` (list of
        ``{tax_category, total, count}`` sorted by total, largest first)
    """
    expenses = Transaction.objects.filter(
        account=account,
        date__year=year,
        type=TransactionType.EXPENSE,
        tax_deductible=True,
    )
    if tax_category:
        expenses = expenses.filter(tax_category__iexact=tax_category)

    grouped = {}
    rows = (
        expenses.order_by()
        .values('tax_category')
        .annotate(total=Sum('amount'), count=Count('id'))
    )
    for row in rows:
        # Blank and missing categories are reported together
        name = row['tax_category'] or 'Uncategorized'
        entry = grouped.setdefault(name, {'tax_category': name, 'total': ZERO, 'count': 0})
        entry['total'] += row['total'] or ZERO
        entry['count'] += row['count']

    by_category = sorted(grouped.values(), key=lambda entry: entry['total'], reverse=True)
    return {
        'year': year,
        'total': _year_total(expenses),
        'count': expenses.count(),
        'by_category': by_category,
    }

