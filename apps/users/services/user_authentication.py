"""User authentication service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an email/password pair and stamp last_login.

    Email lookup is case-insensitive. The same error is raised for unknown
    emails and wrong passwords so callers cannot tell which emails exist.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If the user is deactivated
    """
    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=email)
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Failed login attempt for %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("User is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
