"""
Access guard dependencies.

Each request gets its own AccessContext, resolved from the bearer token,
and the route guard's outcome is translated into HTTP:

- redirect (no session) -> 401 SIGN_IN_REQUIRED with redirect_to
- upsell (no entitlement) -> 403 ACCESS_REQUIRED
- render -> the route runs with the resolved snapshot
"""

from typing import AsyncIterator, Optional

from fastapi import Depends

from modules.access.exceptions import AccessRequiredError, SignInRequiredError
from modules.access.guard import GuardOutcome, RouteGuard
from modules.access.interfaces import IRoleRepository, ISubscriptionRepository
from modules.access.models import AccessPolicy, AuthorizationSnapshot, RoleName
from modules.access.session import AccessContext
from modules.auth.exceptions import InsufficientPermissionsError
from shared.config import get_settings
from shared.models import AuthenticatedUser

from ..dependencies import get_access_policy, get_role_repository, get_subscription_repository
from .auth import get_optional_user


async def get_access_context(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    roles: IRoleRepository = Depends(get_role_repository),
    subscriptions: ISubscriptionRepository = Depends(get_subscription_repository),
    policy: AccessPolicy = Depends(get_access_policy),
) -> AsyncIterator[AccessContext]:
    """
    Dependency yielding the resolved AccessContext for this request.

    The context is closed when the request finishes.
    """
    context = AccessContext(roles=roles, subscriptions=subscriptions, policy=policy)
    try:
        if user is None:
            context.session_cleared()
        else:
            await context.session_established(user)
        yield context
    finally:
        context.close()


def get_route_guard() -> RouteGuard:
    """FastAPI dependency for a route guard using the configured landing path."""
    return RouteGuard(landing_path=get_settings().landing_path)


async def require_access(
    context: AccessContext = Depends(get_access_context),
    guard: RouteGuard = Depends(get_route_guard),
) -> AuthorizationSnapshot:
    """
    Dependency that admits only principals with access to gated content.

    Usage:
        @router.get("/gated")
        async def gated(snapshot: AuthorizationSnapshot = Depends(require_access)):
            ...
    """
    snapshot = context.snapshot
    decision = guard.evaluate(snapshot)

    if decision.outcome == GuardOutcome.REDIRECT:
        raise SignInRequiredError(decision.redirect_to or guard.landing_path)
    if not decision.allowed:
        raise AccessRequiredError(snapshot.principal.id, guard.landing_path)
    return snapshot


async def require_admin(
    context: AccessContext = Depends(get_access_context),
    guard: RouteGuard = Depends(get_route_guard),
) -> AuthenticatedUser:
    """Dependency that admits only administrators."""
    principal = context.principal
    if principal is None:
        raise SignInRequiredError(guard.landing_path)
    if not context.access.is_admin:
        raise InsufficientPermissionsError(RoleName.ADMIN.value, RoleName.USER.value)
    return principal.model_copy(update={"role": RoleName.ADMIN.value})
