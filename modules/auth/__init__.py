"""
Authentication module.

Identity-provider boundary: sign-in, access-code sign-up, sign-out and the
admin user operations.

Public API:
- IAuthService: Interface for identity operations
- IdentityUser: A principal as the provider reports it
- AuthSession: Tokens issued on sign-in
- Auth exceptions: InvalidCredentialsError, InvalidAccessCodeError, etc.
"""

from .interfaces import IAuthService
from .models import (
    AuthSession,
    IdentityUser,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
)
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    SignUpRejectedError,
    InvalidAccessCodeError,
    IdentityProviderError,
    UserNotFoundError,
    InsufficientPermissionsError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Models
    "AuthSession",
    "IdentityUser",
    "SignInRequest",
    "SignUpRequest",
    "SignUpResponse",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "SignUpRejectedError",
    "InvalidAccessCodeError",
    "IdentityProviderError",
    "UserNotFoundError",
    "InsufficientPermissionsError",
]
