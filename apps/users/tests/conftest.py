import pytest

from apps.users.models import User


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def user_with_reset_token(db):
    """Create a user with a password reset token."""
    user = User.objects.create_user(
        email='resetuser@example.com',
        password='OldPass123!',
        display_name='Reset User',
        email_verified=True,
    )
    user.password_reset_token = 'valid-reset-token-12345'
    user.save()
    return user
