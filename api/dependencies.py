"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Services and repositories are container singletons. AccessContext is the
exception: a new one is created per request, since it holds the state of
one session.
"""

from typing import TYPE_CHECKING

from shared.config import get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.access.interfaces import IRoleRepository, ISubscriptionRepository
    from modules.access.models import AccessPolicy
    from modules.auth.interfaces import IAuthService
    from modules.billing.interfaces import IPaymentWebhookService
    from modules.notifications.interfaces import INotificationService
    from modules.provisioning.service import AccountProvisioner, BulkProvisioningService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._role_repository: "IRoleRepository | None" = None
        self._subscription_repository: "ISubscriptionRepository | None" = None
        self._access_policy: "AccessPolicy | None" = None
        self._auth_service: "IAuthService | None" = None
        self._notification_service: "INotificationService | None" = None
        self._account_provisioner: "AccountProvisioner | None" = None
        self._bulk_provisioning: "BulkProvisioningService | None" = None
        self._webhook_service: "IPaymentWebhookService | None" = None

    @property
    def roles(self) -> "IRoleRepository":
        """Get the role repository instance."""
        if self._role_repository is None:
            from modules.access.repository import RoleRepository
            from shared.database import get_supabase_client
            self._role_repository = RoleRepository(get_supabase_client())
        return self._role_repository

    @property
    def subscriptions(self) -> "ISubscriptionRepository":
        """Get the subscription repository instance."""
        if self._subscription_repository is None:
            from modules.access.repository import SubscriptionRepository
            from shared.database import get_supabase_client
            self._subscription_repository = SubscriptionRepository(get_supabase_client())
        return self._subscription_repository

    @property
    def access_policy(self) -> "AccessPolicy":
        """Get the access policy built from settings."""
        if self._access_policy is None:
            from modules.access.models import AccessPolicy
            self._access_policy = AccessPolicy.from_settings(get_settings())
        return self._access_policy

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            from shared.database import get_supabase_anon_client, get_supabase_client
            settings = get_settings()
            self._auth_service = AuthService(
                db=get_supabase_client(),
                roles=self.roles,
                subscriptions=self.subscriptions,
                anon_client_factory=get_supabase_anon_client,
                email_redirect_url=f"{settings.frontend_url.rstrip('/')}/",
                notifications=self.notifications,
                password_reset_url=f"{settings.frontend_url.rstrip('/')}/auth",
            )
        return self._auth_service

    @property
    def notifications(self) -> "INotificationService":
        """Get the email service instance."""
        if self._notification_service is None:
            from modules.notifications.service import EmailService
            settings = get_settings()
            self._notification_service = EmailService(
                api_key=settings.resend_api_key,
                sender=settings.email_from,
                frontend_url=settings.frontend_url,
            )
        return self._notification_service

    @property
    def provisioner(self) -> "AccountProvisioner":
        """Get the single-account provisioner instance."""
        if self._account_provisioner is None:
            from modules.provisioning.service import AccountProvisioner
            self._account_provisioner = AccountProvisioner(
                auth=self.auth,
                roles=self.roles,
                subscriptions=self.subscriptions,
                notifications=self.notifications,
                subscription_period_days=get_settings().subscription_period_days,
            )
        return self._account_provisioner

    @property
    def bulk_provisioning(self) -> "BulkProvisioningService":
        """Get the bulk provisioning service instance."""
        if self._bulk_provisioning is None:
            from modules.provisioning.service import BulkProvisioningService
            from modules.provisioning.throttle import ProvisioningThrottle
            settings = get_settings()
            self._bulk_provisioning = BulkProvisioningService(
                provisioner=self.provisioner,
                throttle=ProvisioningThrottle(
                    rate=settings.provisioning_rate_per_second,
                    burst=settings.provisioning_burst,
                ),
            )
        return self._bulk_provisioning

    @property
    def webhooks(self) -> "IPaymentWebhookService":
        """Get the payment webhook service instance."""
        if self._webhook_service is None:
            from modules.billing.service import PaymentWebhookService
            settings = get_settings()
            self._webhook_service = PaymentWebhookService(
                auth=self.auth,
                subscriptions=self.subscriptions,
                notifications=self.notifications,
                webhook_token=settings.payment_webhook_token,
                plan_type=settings.default_paid_plan,
                subscription_period_days=settings.subscription_period_days,
            )
        return self._webhook_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._role_repository = None
        self._subscription_repository = None
        self._access_policy = None
        self._auth_service = None
        self._notification_service = None
        self._account_provisioner = None
        self._bulk_provisioning = None
        self._webhook_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_role_repository() -> "IRoleRepository":
    """FastAPI dependency for the role repository."""
    return get_container().roles


def get_subscription_repository() -> "ISubscriptionRepository":
    """FastAPI dependency for the subscription repository."""
    return get_container().subscriptions


def get_access_policy() -> "AccessPolicy":
    """FastAPI dependency for the access policy."""
    return get_container().access_policy


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_account_provisioner() -> "AccountProvisioner":
    """FastAPI dependency for the account provisioner."""
    return get_container().provisioner


def get_bulk_provisioning_service() -> "BulkProvisioningService":
    """FastAPI dependency for bulk provisioning."""
    return get_container().bulk_provisioning


def get_webhook_service() -> "IPaymentWebhookService":
    """FastAPI dependency for the payment webhook service."""
    return get_container().webhooks
