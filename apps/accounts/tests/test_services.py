"""
Tests for accounts services.

These tests verify the business logic in the services layer,
independent of the HTTP layer.
"""

import pytest
from django.test import override_settings

from apps.accounts.models import Account
from apps.accounts.services import (
    create_account,
    delete_account,
    ensure_default_account,
    get_account_for_user,
    get_current_account,
    switch_account,
    update_account,
    AccountLimitReachedError,
    AccountNotFoundError,
    InsufficientPermissionsError,
)
from apps.transactions.models import Category


@pytest.mark.django_db
class TestCreateAccount:

    def test_seeds_uncategorized(self, user):
        account = create_account(owner=user, name='Shop')

        names = list(Category.objects.filter(account=account).values_list('name', 'type'))
        assert sorted(names) == [('Uncategorized', 'expense'), ('Uncategorized', 'income')]

    def test_free_limit(self, user, account):
        with pytest.raises(AccountLimitReachedError, match='limited to 1 account'):
            create_account(owner=user, name='Another')

    @override_settings(FREE_TIER_ACCOUNT_LIMIT=2)
    def test_free_limit_is_configurable(self, user, account):
        create_account(owner=user, name='Another')

        with pytest.raises(AccountLimitReachedError, match='2 accounts'):
            create_account(owner=user, name='Third')

    def test_pro_has_no_limit(self, pro_user):
        for index in range(4):
            create_account(owner=pro_user, name=f'Shop {index}')

        assert Account.objects.filter(owner=pro_user).count() == 4


@pytest.mark.django_db
class TestEnsureDefaultAccount:

    def test_creates_and_selects(self, user):
        account = ensure_default_account(user=user)

        user.refresh_from_db()
        assert account.name == 'Default Account'
        assert user.preferences['current_account_id'] == str(account.id)

    def test_idempotent(self, user):
        first = ensure_default_account(user=user)
        second = ensure_default_account(user=user)

        assert first == second
        assert Account.objects.filter(owner=user).count() == 1


@pytest.mark.django_db
class TestCurrentAccount:

    def test_falls_back_to_oldest(self, pro_user):
        first = create_account(owner=pro_user, name='First')
        create_account(owner=pro_user, name='Second')

        assert get_current_account(user=pro_user) == first

    def test_stale_selection_falls_back(self, pro_user):
        first = create_account(owner=pro_user, name='First')
        pro_user.preferences = {'current_account_id': 'garbage'}
        pro_user.save()

        assert get_current_account(user=pro_user) == first

    def test_none_without_accounts(self, user):
        assert get_current_account(user=user) is None

    def test_switch(self, pro_user):
        create_account(owner=pro_user, name='First')
        second = create_account(owner=pro_user, name='Second')

        switch_account(user=pro_user, account_id=second.id)

        assert get_current_account(user=pro_user) == second

    def test_switch_to_foreign(self, user, other_account):
        with pytest.raises(AccountNotFoundError):
            switch_account(user=user, account_id=other_account.id)

    def test_get_account_for_user_rejects_foreign(self, user, other_account):
        with pytest.raises(AccountNotFoundError):
            get_account_for_user(account_id=other_account.id, user=user)


@pytest.mark.django_db
class TestUpdateDeleteAccount:

    def test_update_partial(self, user, account):
        updated = update_account(account_id=account.id, user=user, currency='USD')

        assert updated.currency == 'USD'
        assert updated.name == 'Default Account'

    def test_update_requires_owner(self, other_user, account):
        with pytest.raises(InsufficientPermissionsError):
            update_account(account_id=account.id, user=other_user, name='Mine now')

    def test_delete_requires_owner(self, other_user, account):
        with pytest.raises(InsufficientPermissionsError):
            delete_account(account_id=account.id, user=other_user)

    def test_delete_cascades(self, user, account):
        delete_account(account_id=account.id, user=user)

        assert not Account.objects.filter(id=account.id).exists()
        assert not Category.objects.filter(account_id=account.id).exists()
