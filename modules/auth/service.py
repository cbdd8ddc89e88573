"""
Authentication service implementation.

Wraps Supabase Auth as the identity provider: end-user sign-in, access-code
sign-up and sign-out, plus the admin operations used by the dashboard,
bulk provisioning and the payment webhook.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from supabase import Client
from supabase_auth.errors import AuthError as ProviderAuthError

from modules.access.decision import as_utc
from modules.access.exceptions import LookupFailedError
from modules.access.interfaces import IRoleRepository, ISubscriptionRepository
from modules.access.models import RoleName, SubscriptionRecord, SubscriptionStatus
from modules.notifications.interfaces import INotificationService

from .interfaces import IAuthService
from .models import AuthSession, IdentityUser, SignUpRequest, SignUpResponse
from .exceptions import (
    IdentityProviderError,
    InvalidAccessCodeError,
    InvalidCredentialsError,
    SignUpRejectedError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

# Page size for admin user listing
LIST_USERS_PAGE_SIZE = 1000


def validate_access_code(
    record: Optional[SubscriptionRecord],
    email: str,
    now: datetime,
) -> None:
    """
    Check that a subscription record allows registering `email`.

    Raises:
        InvalidAccessCodeError: With the reason the code was refused
    """
    if record is None:
        raise InvalidAccessCodeError("unknown_code")
    if record.status != SubscriptionStatus.ACTIVE:
        raise InvalidAccessCodeError("inactive_subscription")
    if record.expires_at is not None and as_utc(record.expires_at) < as_utc(now):
        raise InvalidAccessCodeError("expired_subscription")
    if record.customer_email and record.customer_email.strip().lower() != email.strip().lower():
        raise InvalidAccessCodeError("email_mismatch")


def _to_identity_user(user: Any) -> IdentityUser:
    return IdentityUser(
        id=str(user.id),
        email=user.email or "",
        created_at=user.created_at,
        user_metadata=user.user_metadata or {},
    )


def _to_session(session: Any, user: Any) -> AuthSession:
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token or "",
        expires_at=session.expires_at,
        user=_to_identity_user(user),
    )


class AuthService(IAuthService):
    """
    Implementation of the identity-provider boundary over Supabase Auth.

    Admin operations run on the service-role client. Sign-in and sign-up
    run on a fresh anon client per call so no session leaks between users.
    """

    def __init__(
        self,
        db: Client,
        roles: IRoleRepository,
        subscriptions: ISubscriptionRepository,
        anon_client_factory: Callable[[], Client],
        email_redirect_url: Optional[str] = None,
        notifications: Optional[INotificationService] = None,
        password_reset_url: Optional[str] = None,
    ):
        self._db = db
        self._roles = roles
        self._subscriptions = subscriptions
        self._anon_client_factory = anon_client_factory
        self._email_redirect_url = email_redirect_url
        self._notifications = notifications
        self._password_reset_url = password_reset_url

    async def sign_in(self, email: str, password: str) -> AuthSession:
        client = self._anon_client_factory()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except ProviderAuthError as e:
            logger.info(f"Sign-in rejected for {email}: {e.message}")
            raise InvalidCredentialsError(e.message)

        if response.session is None or response.user is None:
            raise InvalidCredentialsError()
        return _to_session(response.session, response.user)

    async def sign_up(self, request: SignUpRequest) -> SignUpResponse:
        """
        Register with an access code.

        The code must belong to an active, unexpired subscription issued to
        the same email (when the record carries one). After the account is
        created the subscription is bound to it; a failed bind is logged and
        left for an admin to fix, since the account already exists.
        """
        email = str(request.email)
        record = self._subscriptions.get_by_access_code(request.access_code)
        validate_access_code(record, email, datetime.now(timezone.utc))

        options: dict[str, Any] = {"data": {"full_name": request.full_name}}
        if self._email_redirect_url:
            options["email_redirect_to"] = self._email_redirect_url

        client = self._anon_client_factory()
        try:
            response = client.auth.sign_up({
                "email": email,
                "password": request.password,
                "options": options,
            })
        except ProviderAuthError as e:
            logger.info(f"Sign-up rejected for {email}: {e.message}")
            raise SignUpRejectedError(e.message)

        if response.user is None:
            raise SignUpRejectedError("Sign-up did not return a user")

        linked = False
        try:
            linked = self._subscriptions.bind_to_user(
                request.access_code, str(response.user.id), email
            ) is not None
        except LookupFailedError as e:
            logger.error(f"Could not bind access code to new user {response.user.id}: {e.message}")

        logger.info(f"Registered user {response.user.id} (subscription linked: {linked})")

        session = None
        if response.session is not None:
            session = _to_session(response.session, response.user)
        return SignUpResponse(
            user=_to_identity_user(response.user),
            session=session,
            subscription_linked=linked,
        )

    async def sign_out(self, access_token: str) -> None:
        try:
            self._db.auth.admin.sign_out(access_token)
        except ProviderAuthError as e:
            raise IdentityProviderError(e.message, operation="sign_out")

    async def create_user(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> IdentityUser:
        try:
            response = self._db.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata or {},
            })
        except ProviderAuthError as e:
            raise IdentityProviderError(e.message, operation="create_user")

        if response.user is None:
            raise IdentityProviderError("Failed to create user", operation="create_user")

        logger.info(f"Created user {response.user.id}")
        return _to_identity_user(response.user)

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a principal and the rows that reference it.

        The role and subscription rows go first; if that fails the identity
        is kept, so retrying the deletion is safe.
        """
        self._roles.delete_for_user(user_id)
        self._subscriptions.delete_for_user(user_id)
        try:
            self._db.auth.admin.delete_user(user_id)
        except ProviderAuthError as e:
            raise IdentityProviderError(e.message, operation="delete_user")
        logger.info(f"Deleted user {user_id}")

    async def list_users(self) -> list[IdentityUser]:
        users: list[IdentityUser] = []
        page = 1
        while True:
            try:
                batch = self._db.auth.admin.list_users(page=page, per_page=LIST_USERS_PAGE_SIZE)
            except ProviderAuthError as e:
                raise IdentityProviderError(e.message, operation="list_users")
            users.extend(_to_identity_user(u) for u in batch)
            if len(batch) < LIST_USERS_PAGE_SIZE:
                return users
            page += 1

    async def get_user_by_email(self, email: str) -> Optional[IdentityUser]:
        wanted = email.strip().lower()
        for user in await self.list_users():
            if user.email.lower() == wanted:
                return user
        return None

    async def promote_to_admin(self, email: str) -> IdentityUser:
        user = await self.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        self._roles.assign_role(user.id, RoleName.ADMIN)
        logger.info(f"Promoted user {user.id} to admin")
        return user

    async def send_password_reset(self, email: str) -> bool:
        """
        Email a password recovery link.

        Unknown emails are logged and reported as not sent, without an
        error, so the endpoint does not reveal which emails have accounts.
        """
        user = await self.get_user_by_email(email)
        if user is None:
            logger.info(f"Password reset requested for unknown email {email}")
            return False

        options: dict[str, Any] = {}
        if self._password_reset_url:
            options["redirect_to"] = self._password_reset_url
        try:
            response = self._db.auth.admin.generate_link({
                "type": "recovery",
                "email": user.email,
                "options": options,
            })
        except ProviderAuthError as e:
            raise IdentityProviderError(e.message, operation="generate_recovery_link")

        properties = getattr(response, "properties", None)
        link = getattr(properties, "action_link", None)
        if not link:
            raise IdentityProviderError(
                "Recovery link was not generated", operation="generate_recovery_link"
            )

        if self._notifications is None:
            logger.warning(f"No email service configured, reset link for {user.id} not sent")
            return False
        return await self._notifications.send_password_reset(user.email, link)
