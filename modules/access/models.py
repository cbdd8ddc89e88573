"""
Access module data models.

These models define roles, subscription records and the derived
authorization state that the rest of the application reads.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from shared.models import AuthenticatedUser


T = TypeVar("T")


class RoleName(str, Enum):
    """Application roles. A principal without a role row is a USER."""

    USER = "user"
    ADMIN = "admin"


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a subscription record."""

    ACTIVE = "active"
    PENDING = "pending"      # Order created, payment not confirmed
    INACTIVE = "inactive"    # Refunded, cancelled or switched off by an admin


class PlanType(str, Enum):
    """Purchasable plans. FREE never confers access."""

    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"


class LookupFailurePolicy(str, Enum):
    """How a failed subscription lookup is treated when deciding access."""

    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """
    Outcome of reading one row from the store.

    Keeps "the row does not exist" apart from "the store could not answer",
    so the access decision never mistakes an outage for an absent row.
    """

    status: LookupStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(LookupStatus.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "Lookup[T]":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "Lookup[T]":
        return cls(LookupStatus.FAILED, error=error)

    @classmethod
    def of(cls, value: Optional[T]) -> "Lookup[T]":
        """Wrap a repository result: None means not found."""
        return cls.not_found() if value is None else cls.found(value)

    @property
    def is_found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @property
    def is_failed(self) -> bool:
        return self.status == LookupStatus.FAILED


class RoleAssignment(BaseModel):
    """A row of the user_roles table."""

    user_id: str = Field(..., description="Principal ID")
    role: RoleName = Field(default=RoleName.USER, description="Effective role")

    model_config = {"extra": "ignore"}


class SubscriptionRecord(BaseModel):
    """
    A row of the subscriptions table.

    user_id stays empty until the buyer registers with their access code
    (or an admin links the record).
    """

    id: Optional[str] = Field(None, description="Subscription ID (UUID)")
    user_id: Optional[str] = Field(None, description="Linked principal ID")
    customer_email: Optional[str] = Field(None, description="Buyer email")
    customer_name: Optional[str] = Field(None, description="Buyer name")
    status: SubscriptionStatus = Field(..., description="Subscription status")
    plan_type: PlanType = Field(default=PlanType.FREE, description="Plan")
    access_code: Optional[str] = Field(None, description="Code issued at purchase")
    order_id: Optional[str] = Field(None, description="Payment processor order ID")
    expires_at: Optional[datetime] = Field(None, description="Expiry, None means no expiry")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    registration_completed_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class AccessState(BaseModel):
    """
    Derived authorization state for one session.

    Never persisted; recomputed whenever the session changes.
    """

    is_admin: bool = False
    is_subscribed: bool = False
    has_access: bool = False

    model_config = {"frozen": True}

    @classmethod
    def denied(cls) -> "AccessState":
        return cls(is_admin=False, is_subscribed=False, has_access=False)


class AccessPolicy(BaseModel):
    """Caller-supplied inputs to the access decision besides the rows."""

    allowlist: frozenset[str] = Field(
        default_factory=frozenset,
        description="Emails that always have access (lower-cased)",
    )
    on_lookup_failure: LookupFailurePolicy = Field(
        default=LookupFailurePolicy.FAIL_CLOSED,
        description="Treatment of a subscription lookup that failed",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings) -> "AccessPolicy":
        return cls(
            allowlist=frozenset(e.strip().lower() for e in settings.access_allowlist if e.strip()),
            on_lookup_failure=LookupFailurePolicy(settings.access_lookup_failure_policy),
        )

    def allows_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.allowlist


class AuthorizationSnapshot(BaseModel):
    """
    What listeners of an AccessContext receive.

    resolved is False until the first decision for the session is published.
    """

    principal: Optional[AuthenticatedUser] = None
    access: AccessState = Field(default_factory=AccessState.denied)
    resolved: bool = False

    model_config = {"frozen": True}


class AccessStateResponse(BaseModel):
    """API response describing the caller's access."""

    authenticated: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool
    is_subscribed: bool
    has_access: bool
