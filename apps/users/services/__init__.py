"""Services for user registration, authentication and subscription state."""

from .exceptions import (
    UsersServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .password_reset import request_password_reset, confirm_password_reset
from .welcome_email import send_welcome_email
from .trial import get_trial_status

__all__ = [
    # Exceptions
    'UsersServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    'UserNotFoundError',
    # Services
    'register_user',
    'authenticate_user',
    'request_password_reset',
    'confirm_password_reset',
    'send_welcome_email',
    'get_trial_status',
]
