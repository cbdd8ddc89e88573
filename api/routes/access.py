"""
Access state endpoints.

The chat client asks these endpoints what the signed-in principal may see
instead of deciding it in the browser.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.access.guard import GuardOutcome, RouteGuard
from modules.access.models import AccessStateResponse, AuthorizationSnapshot
from modules.access.session import AccessContext
from shared.models import AuthenticatedUser

from ..middleware.access import get_access_context, get_route_guard, require_access
from ..middleware.auth import get_current_user

router = APIRouter()


class GuardDecisionResponse(BaseModel):
    """What a protected view should show."""

    outcome: GuardOutcome
    redirect_to: Optional[str] = None


def _to_response(snapshot: AuthorizationSnapshot) -> AccessStateResponse:
    principal = snapshot.principal
    return AccessStateResponse(
        authenticated=principal is not None,
        user_id=principal.id if principal else None,
        email=principal.email if principal else None,
        is_admin=snapshot.access.is_admin,
        is_subscribed=snapshot.access.is_subscribed,
        has_access=snapshot.access.has_access,
    )


@router.get("/state", response_model=AccessStateResponse)
async def get_access_state(
    context: AccessContext = Depends(get_access_context),
) -> AccessStateResponse:
    """
    Get the caller's access state.

    Anonymous callers get the denied state rather than 401.
    """
    return _to_response(context.snapshot)


@router.get("/guard", response_model=GuardDecisionResponse)
async def get_guard_decision(
    context: AccessContext = Depends(get_access_context),
    guard: RouteGuard = Depends(get_route_guard),
) -> GuardDecisionResponse:
    """Evaluate the route guard for the caller: redirect, upsell or render."""
    decision = guard.evaluate(context.snapshot)
    return GuardDecisionResponse(outcome=decision.outcome, redirect_to=decision.redirect_to)


@router.post("/refresh", response_model=AccessStateResponse)
async def refresh_access_state(
    user: AuthenticatedUser = Depends(get_current_user),
    context: AccessContext = Depends(get_access_context),
) -> AccessStateResponse:
    """
    Re-read the caller's role and return the updated state.

    Called after a promotion so a new admin does not have to sign in again.
    """
    snapshot = await context.refresh()
    return _to_response(snapshot)


@router.get("/check", response_model=AccessStateResponse)
async def check_access(
    snapshot: AuthorizationSnapshot = Depends(require_access),
) -> AccessStateResponse:
    """
    Gate for chat content.

    401 SIGN_IN_REQUIRED without a session, 403 ACCESS_REQUIRED without an
    entitlement, otherwise the caller's state.
    """
    return _to_response(snapshot)
