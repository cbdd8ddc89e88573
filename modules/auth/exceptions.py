"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
Identity-provider messages are passed through verbatim so the UI can
show them to the user.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Missing authorization header"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when the identity provider rejects a sign-in."""

    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class SignUpRejectedError(ValidationError):
    """Raised when the identity provider rejects a registration."""

    def __init__(self, message: str):
        super().__init__(message, code="SIGN_UP_REJECTED")


class InvalidAccessCodeError(ValidationError):
    """Raised when a sign-up access code is unknown, inactive, expired or for another email."""

    def __init__(self, reason: str):
        super().__init__(
            "Invalid or expired access code",
            code="INVALID_ACCESS_CODE",
            details={"reason": reason},
        )


class IdentityProviderError(ExternalServiceError):
    """Raised when an admin operation against the identity provider fails."""

    def __init__(self, message: str, operation: str, code: Optional[str] = None):
        super().__init__(
            message,
            service="supabase_auth",
            code=code or "IDENTITY_PROVIDER_ERROR",
            details={"operation": operation},
        )


class UserNotFoundError(NotFoundError):
    """Raised when no principal matches an ID or email."""

    def __init__(self, identifier: str):
        super().__init__(
            f"User not found: {identifier}",
            code="USER_NOT_FOUND",
            details={"user": identifier},
        )


class InsufficientPermissionsError(AuthorizationError):
    """Raised when user lacks required permissions."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )
