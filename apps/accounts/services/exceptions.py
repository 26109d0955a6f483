"""
Domain-specific exceptions for accounts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""
from rest_framework.exceptions import APIException


class AccountsServiceError(Exception):
    """Base exception for all accounts service errors."""
    pass


class AccountNotFoundError(AccountsServiceError):
    """Raised when an account does not exist or belongs to someone else."""
    pass


class AccountLimitReachedError(AccountsServiceError):
    """Raised when a free-tier user tries to own more accounts than allowed."""
    pass


class InsufficientPermissionsError(AccountsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class NoActiveAccount(APIException):
    """Request needs an account but the user has none."""
    status_code = 400
    default_detail = 'No active account.'
    default_code = 'no_active_account'


class AccountNotAccessible(APIException):
    """Requested account does not exist or is not owned by the user."""
    status_code = 404
    default_detail = 'Account not found.'
    default_code = 'account_not_found'
