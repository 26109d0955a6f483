"""
Accounts app services layer.

An account is the tenant scope: every client, invoice, transaction, budget,
asset, liability and bank statement hangs off exactly one account.
"""

from .exceptions import (
    AccountsServiceError,
    AccountNotFoundError,
    AccountLimitReachedError,
    InsufficientPermissionsError,
    NoActiveAccount,
    AccountNotAccessible,
)

from .account_management import (
    create_account,
    update_account,
    delete_account,
    ensure_default_account,
    get_account_for_user,
    get_current_account,
    switch_account,
)


__all__ = [
    # Exceptions
    'AccountsServiceError',
    'AccountNotFoundError',
    'AccountLimitReachedError',
    'InsufficientPermissionsError',
    'NoActiveAccount',
    'AccountNotAccessible',

    # Account Management
    'create_account',
    'update_account',
    'delete_account',
    'ensure_default_account',
    'get_account_for_user',
    'get_current_account',
    'switch_account',
]
