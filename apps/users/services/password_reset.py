"""Password reset service."""

import logging
import secrets
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.contrib.auth import get_user_model

from .exceptions import UserNotFoundError, InvalidTokenError

User = get_user_model()
logger = logging.getLogger(__name__)


def _send_reset_email(user, reset_token):
    reset_link = f"{settings.FRONTEND_URL}/reset-password?token={reset_token}"
    try:
        send_mail(
            subject='Reset your Ledgerly password',
            message=(
                f"Hi {user.get_display_name()},\n\n"
                f"Use the link below to choose a new password:\n{reset_link}\n\n"
                "If you did not request this, you can ignore this email."
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except (SMTPException, OSError) as e:
        # The reset endpoint answers the same way whether or not mail went out
        logger.error("Password reset email to user %s failed: %s", user.id, e)


@transaction.atomic
def request_password_reset(*, email: str) -> str:
    """
    Generate a password reset token and email it to the user.

    The email is sent after the transaction commits.

    Args:
        email: User's email address

    Returns:
        Reset token

    Raises:
        UserNotFoundError: If no active user has this email
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email, is_active=True)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"No active user with email: {email}")

    reset_token = secrets.token_urlsafe(32)
    user.password_reset_token = reset_token
    user.save(update_fields=['password_reset_token'])

    transaction.on_commit(lambda: _send_reset_email(user, reset_token))
    logger.info("Password reset requested for user %s", user.id)

    return reset_token


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> User:
    """
    Set a new password for the user holding ``token`` and burn the token.

    Raises:
        InvalidTokenError: If token is invalid or already used
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(password_reset_token=token, is_active=True)
        )
    except User.DoesNotExist:
        raise InvalidTokenError("Invalid or expired reset token")

    user.set_password(new_password)
    user.password_reset_token = None
    user.save(update_fields=['password', 'password_reset_token'])

    return user
