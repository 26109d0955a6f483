"""Welcome email sent after signup."""

import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def build_welcome_email_body(user) -> str:
    return "\n".join([
        f"Hi {user.get_display_name()},",
        "",
        "Thank you for choosing Ledgerly to run your business finances.",
        "",
        "With Ledgerly you can:",
        "  - Track your income and expenses",
        "  - Create budgets and follow how much is left",
        "  - Send invoices and see who has paid",
        "  - Reconcile bank statements and pull financial reports",
        "",
        f"Your free trial lasts {settings.TRIAL_LENGTH_DAYS} days. Open your dashboard to get started:",
        f"{settings.FRONTEND_URL}/dashboard",
        "",
        "You received this email because you signed up for Ledgerly.",
    ])


def send_welcome_email(user) -> bool:
    """
    Send the welcome email to a newly registered user.

    Mail failures are logged and do not affect the registration.

    Returns:
        True if the email was handed to the mail backend
    """
    try:
        send_mail(
            subject='Welcome to Ledgerly',
            message=build_welcome_email_body(user),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except (SMTPException, OSError) as e:
        logger.error("Welcome email to user %s failed: %s", user.id, e)
        return False

    logger.info("Sent welcome email to user %s", user.id)
    return True
