import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.services import ensure_default_account
from apps.users.models import User, SubscriptionTier


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Keep uploaded receipts and statements out of the project tree."""
    settings.MEDIA_ROOT = str(tmp_path / 'media')


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a free-tier test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
        email_verified=True,
    )


@pytest.fixture
def pro_user(db):
    """Create and return a pro-tier test user."""
    return User.objects.create_user(
        email='prouser@example.com',
        password='TestPass123!',
        display_name='Pro User',
        email_verified=True,
        subscription_tier=SubscriptionTier.PRO,
    )


@pytest.fixture
def other_user(db):
    """Create and return another test user."""
    return User.objects.create_user(
        email='otheruser@example.com',
        password='OtherPass123!',
        display_name='Other User',
        email_verified=True,
    )


@pytest.fixture
def account(user):
    """The user's default (and current) account."""
    account = ensure_default_account(user=user)
    user.refresh_from_db()
    return account


@pytest.fixture
def other_account(other_user):
    """An account belonging to someone else."""
    account = ensure_default_account(user=other_user)
    other_user.refresh_from_db()
    return account


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def pro_client(pro_user):
    """API client authenticated as the pro user."""
    return _client_for(pro_user)


@pytest.fixture
def other_client(other_user):
    """API client authenticated as the other user."""
    return _client_for(other_user)
