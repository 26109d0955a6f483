"""Domain-specific exceptions for budgets app."""


class BudgetsServiceError(Exception):
    """Base exception for all budgets service errors."""
    pass


class BudgetNotFoundError(BudgetsServiceError):
    """Raised when a budget does not exist in the account."""
    pass


class BudgetNotRecurringError(BudgetsServiceError):
    """Raised when asking for the next period of a one-off budget."""
    pass
