"""
Access module.

Decides whether a principal may reach gated content and keeps that
decision current for a session.

Public API:
- compute_access: Pure access decision over role and subscription lookups
- AccessContext: Per-session resolution of role/subscription into AccessState
- RouteGuard: Loading / redirect / upsell / render decision for a view
"""

from .decision import compute_access, subscription_confers_access
from .guard import GuardDecision, GuardOutcome, GuardPhase, RouteGuard
from .interfaces import IRoleRepository, ISubscriptionRepository
from .models import (
    AccessPolicy,
    AccessState,
    AuthorizationSnapshot,
    Lookup,
    LookupFailurePolicy,
    LookupStatus,
    PlanType,
    RoleAssignment,
    RoleName,
    SubscriptionRecord,
    SubscriptionStatus,
)
from .exceptions import LookupFailedError, AccessRequiredError, SignInRequiredError
from .session import AccessContext

__all__ = [
    # Decision
    "compute_access",
    "subscription_confers_access",
    # Session + guard
    "AccessContext",
    "RouteGuard",
    "GuardDecision",
    "GuardOutcome",
    "GuardPhase",
    # Interfaces
    "IRoleRepository",
    "ISubscriptionRepository",
    # Models
    "AccessPolicy",
    "AccessState",
    "AuthorizationSnapshot",
    "Lookup",
    "LookupFailurePolicy",
    "LookupStatus",
    "PlanType",
    "RoleAssignment",
    "RoleName",
    "SubscriptionRecord",
    "SubscriptionStatus",
    # Exceptions
    "LookupFailedError",
    "AccessRequiredError",
    "SignInRequiredError",
]
