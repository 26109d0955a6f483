"""User registration service."""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.services import ensure_default_account

from .exceptions import UserRegistrationError
from .welcome_email import send_welcome_email

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new user, start their trial and provision a default account.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            trial_end_date=timezone.now() + timedelta(days=settings.TRIAL_LENGTH_DAYS),
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {str(e)}")

    # Every user starts with one account and its Uncategorized categories
    ensure_default_account(user=user)
    user.refresh_from_db(fields=['preferences'])

    transaction.on_commit(lambda: send_welcome_email(user))

    logger.info("Registered user %s", user.id)
    return user
