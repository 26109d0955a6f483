"""Domain-specific exceptions for user services."""


class UsersServiceError(Exception):
    """Base exception for user services."""
    pass


class UserRegistrationError(UsersServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(UsersServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(UsersServiceError):
    """Raised when the user is deactivated."""
    pass


class InvalidTokenError(UsersServiceError):
    """Raised when a password reset token is invalid."""
    pass


class UserNotFoundError(UsersServiceError):
    """Raised when user does not exist."""
    pass
