"""
Access decision.

Pure functions deciding whether a principal may reach gated content.
Nothing here performs I/O; the rows arrive already looked up, and a
failed lookup arrives as an explicit Lookup.failed signal.
"""

from datetime import datetime, timezone
from typing import Optional

from shared.models import AuthenticatedUser

from .models import (
    AccessPolicy,
    AccessState,
    Lookup,
    LookupFailurePolicy,
    PlanType,
    RoleAssignment,
    RoleName,
    SubscriptionRecord,
    SubscriptionStatus,
)


def as_utc(value: datetime) -> datetime:
    # Supabase returns timestamptz; naive values are read as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def subscription_confers_access(record: SubscriptionRecord, now: datetime) -> bool:
    """
    True iff the record is active, on a paid plan and not expired at `now`.
    """
    if record.status != SubscriptionStatus.ACTIVE:
        return False
    if record.plan_type == PlanType.FREE:
        return False
    if record.expires_at is None:
        return True
    return as_utc(record.expires_at) > as_utc(now)


def compute_access(
    principal: Optional[AuthenticatedUser],
    role: Lookup[RoleAssignment],
    subscription: Lookup[SubscriptionRecord],
    now: datetime,
    *,
    policy: AccessPolicy = AccessPolicy(),
) -> AccessState:
    """
    Compute the derived authorization state for a principal.

    Args:
        principal: The authenticated principal, or None when signed out.
        role: Role row lookup for the principal.
        subscription: Subscription row lookup for the principal.
        now: Reference time for expiry checks.
        policy: Allow-list and the treatment of failed lookups.

    Returns:
        AccessState with is_admin, is_subscribed and has_access.

    A failed role lookup never grants admin. A failed subscription lookup
    counts as subscribed only under LookupFailurePolicy.FAIL_OPEN.
    """
    if principal is None:
        return AccessState.denied()

    is_admin = role.is_found and role.value.role == RoleName.ADMIN

    if subscription.is_failed:
        is_subscribed = policy.on_lookup_failure == LookupFailurePolicy.FAIL_OPEN
    elif subscription.is_found:
        is_subscribed = subscription_confers_access(subscription.value, now)
    else:
        is_subscribed = False

    has_access = is_admin or is_subscribed or policy.allows_email(principal.email)

    return AccessState(
        is_admin=is_admin,
        is_subscribed=is_subscribed,
        has_access=has_access,
    )
