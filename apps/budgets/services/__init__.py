"""Budgets app services layer."""

from .exceptions import (
    BudgetsServiceError,
    BudgetNotFoundError,
    BudgetNotRecurringError,
)

from .budget_management import (
    budget_progress,
    next_period,
    create_next_recurring_budget,
)


__all__ = [
    # Exceptions
    'BudgetsServiceError',
    'BudgetNotFoundError',
    'BudgetNotRecurringError',

    # Budget Management
    'budget_progress',
    'next_period',
    'create_next_recurring_budget',
]
