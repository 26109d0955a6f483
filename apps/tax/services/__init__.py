"""
Tax services.

Estimates of income tax, education tax, IT levy and VAT from recorded data.
"""

from .tax_calculation import (
    get_tax_settings,
    consolidated_relief_allowance,
    personal_income_tax,
    qualifies_as_small_business,
    calculate_tax_summary,
    deductible_expenses,
)

__all__ = [
    'get_tax_settings',
    'consolidated_relief_allowance',
    'personal_income_tax',
    'qualifies_as_small_business',
    'calculate_tax_summary',
    'deductible_expenses',
]
