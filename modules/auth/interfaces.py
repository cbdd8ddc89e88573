"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
The provisioning and billing modules use it to create and find principals
without knowing about Supabase Auth.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import AuthSession, IdentityUser, SignUpRequest, SignUpResponse


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for identity-provider operations.

    This protocol defines the contract that the auth module exposes
    to other modules. Implementations must provide all these methods.
    """

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign a principal in with email and password.

        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
        """
        ...

    async def sign_up(self, request: SignUpRequest) -> SignUpResponse:
        """
        Register a principal after validating their access code.

        Raises:
            InvalidAccessCodeError: If the code does not grant registration
            SignUpRejectedError: If the provider rejects the registration
        """
        ...

    async def sign_out(self, access_token: str) -> None:
        """Revoke the sessions of the token's principal."""
        ...

    async def create_user(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> IdentityUser:
        """
        Create a confirmed principal as an administrator.

        Raises:
            IdentityProviderError: With the provider's message if creation fails
        """
        ...

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a principal along with its role and subscription rows.

        Raises:
            IdentityProviderError: If deletion fails
        """
        ...

    async def get_user_by_email(self, email: str) -> Optional[IdentityUser]:
        """
        Get a principal by email (case-insensitive).

        Returns:
            IdentityUser if found, None otherwise
        """
        ...

    async def list_users(self) -> list[IdentityUser]:
        """List every principal known to the identity provider."""
        ...

    async def promote_to_admin(self, email: str) -> IdentityUser:
        """
        Give the principal with this email the admin role.

        Raises:
            UserNotFoundError: If no principal has this email
        """
        ...

    async def send_password_reset(self, email: str) -> bool:
        """
        Email a recovery link to the principal with this email.

        Returns:
            True if sent, False for an unknown email or when email is not configured

        Raises:
            IdentityProviderError: If the link cannot be generated
            NotificationError: If the email provider rejects the message
        """
        ...
