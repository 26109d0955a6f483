"""
Account management service.

Handles account CRUD, the free-tier account limit and the user's current
account selection. All state-changing operations run in a transaction and
lock the owning user row so concurrent creates cannot exceed the limit.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.contrib.auth import get_user_model

from apps.accounts.models import Account
from apps.transactions.models import Category, TransactionType

from .exceptions import (
    AccountLimitReachedError,
    AccountNotFoundError,
    InsufficientPermissionsError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_NAME = 'Default Account'
DEFAULT_ACCOUNT_DESCRIPTION = 'Your default account'
DEFAULT_CATEGORY_NAME = 'Uncategorized'
CURRENT_ACCOUNT_KEY = 'current_account_id'


def _limit_message(limit):
    noun = 'account' if limit == 1 else 'accounts'
    return (
        f"Free users are limited to {limit} {noun}. "
        "Please upgrade to create more accounts."
    )


def _seed_default_categories(account: Account) -> None:
    for category_type in (TransactionType.INCOME, TransactionType.EXPENSE):
        Category.objects.get_or_create(
            account=account,
            name=DEFAULT_CATEGORY_NAME,
            type=category_type,
        )


def _set_current(user, account: Optional[Account]) -> None:
    preferences = dict(user.preferences or {})
    if account is None:
        preferences.pop(CURRENT_ACCOUNT_KEY, None)
    else:
        preferences[CURRENT_ACCOUNT_KEY] = str(account.id)
    user.preferences = preferences
    user.save(update_fields=['preferences'])


@transaction.atomic
def create_account(
    *,
    owner: User,
    name: str,
    description: str = '',
    currency: Optional[str] = None
) -> Account:
    """
    Create an account for ``owner`` and seed its Uncategorized categories.

    Free-tier users may own at most FREE_TIER_ACCOUNT_LIMIT accounts; pro
    users are unlimited.

    Args:
        owner: User who will own the account
        name: Account name
        description: Optional description
        currency: ISO currency code (defaults to DEFAULT_CURRENCY)

    Returns:
        Created Account instance

    Raises:
        AccountLimitReachedError: If a free user is already at the limit
    """
    # Lock the owner so two concurrent creates see the same count
    owner = User.objects.select_for_update().get(id=owner.id)

    if not owner.is_pro:
        limit = settings.FREE_TIER_ACCOUNT_LIMIT
        if Account.objects.filter(owner=owner).count() >= limit:
            raise AccountLimitReachedError(_limit_message(limit))

    account = Account.objects.create(
        owner=owner,
        name=name,
        description=description,
        currency=currency or settings.DEFAULT_CURRENCY,
    )
    _seed_default_categories(account)

    logger.info("Created account %s for user %s", account.id, owner.id)
    return account


@transaction.atomic
def ensure_default_account(*, user: User) -> Account:
    """
    Make sure ``user`` owns at least one account.

    Idempotent: if the user already owns an account the current one is
    returned untouched. Otherwise "Default Account" is created and selected.
    """
    user = User.objects.select_for_update().get(id=user.id)

    existing = get_current_account(user=user)
    if existing is not None:
        return existing

    account = Account.objects.create(
        owner=user,
        name=DEFAULT_ACCOUNT_NAME,
        description=DEFAULT_ACCOUNT_DESCRIPTION,
        currency=settings.DEFAULT_CURRENCY,
    )
    _seed_default_categories(account)
    _set_current(user, account)

    logger.info("Provisioned default account %s for user %s", account.id, user.id)
    return account


def get_account_for_user(*, account_id, user: User) -> Account:
    """
    Fetch an account owned by ``user``.

    Raises:
        AccountNotFoundError: If the id is malformed, unknown or foreign
    """
    try:
        return Account.objects.get(id=account_id, owner=user)
    except (Account.DoesNotExist, ValidationError, ValueError):
        raise AccountNotFoundError(f"Account with ID {account_id} not found")


def get_current_account(*, user: User) -> Optional[Account]:
    """
    Return the user's selected account.

    Falls back to the oldest owned account when nothing is selected or the
    selection no longer points at an owned account.
    """
    account_id = (user.preferences or {}).get(CURRENT_ACCOUNT_KEY)
    if account_id:
        try:
            selected = Account.objects.filter(id=account_id, owner=user).first()
        except ValidationError:
            selected = None
        if selected is not None:
            return selected

    return Account.objects.filter(owner=user).order_by('created_at').first()


@transaction.atomic
def switch_account(*, user: User, account_id: UUID) -> Account:
    """
    Remember ``account_id`` as the user's current account.

    Raises:
        AccountNotFoundError: If the account is not owned by the user
    """
    account = get_account_for_user(account_id=account_id, user=user)
    _set_current(user, account)
    return account


@transaction.atomic
def update_account(
    *,
    account_id: UUID,
    user: User,
    name: Optional[str] = None,
    description: Optional[str] = None,
    currency: Optional[str] = None
) -> Account:
    """
    Update account details (owner only).

    Raises:
        AccountNotFoundError: If account doesn't exist
        InsufficientPermissionsError: If user is not the owner
    """
    try:
        account = Account.objects.select_for_update().get(id=account_id)
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")

    if not account.is_owned_by(user):
        raise InsufficientPermissionsError("Only the account owner can update it")

    update_fields = ['updated_at']
    if name is not None:
        account.name = name
        update_fields.append('name')
    if description is not None:
        account.description = description
        update_fields.append('description')
    if currency is not None:
        account.currency = currency
        update_fields.append('currency')

    account.save(update_fields=update_fields)
    return account


@transaction.atomic
def delete_account(*, account_id: UUID, user: User) -> None:
    """
    Delete an account and everything scoped to it (owner only).

    If it was the current account, the selection is cleared so the next
    lookup falls back to the oldest remaining account.

    Raises:
        AccountNotFoundError: If account doesn't exist
        InsufficientPermissionsError: If user is not the owner
    """
    try:
        account = Account.objects.select_for_update().get(id=account_id)
    except Account.DoesNotExist:
        raise AccountNotFoundError(f"Account with ID {account_id} not found")

    if not account.is_owned_by(user):
        raise InsufficientPermissionsError("Only the account owner can delete it")

    was_current = (user.preferences or {}).get(CURRENT_ACCOUNT_KEY) == str(account.id)
    account.delete()

    if was_current:
        _set_current(user, None)

    logger.info("Deleted account %s", account_id)
