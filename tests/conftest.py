"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
token minting, settings/container isolation and in-memory stand-ins for the
role and subscription tables.
"""

import uuid
from datetime import datetime, timezone, timedelta
from typing import Any, Optional

import pytest
from jose import jwt

from api.dependencies import reset_container
from modules.access.exceptions import LookupFailedError
from modules.access.models import (
    PlanType,
    RoleAssignment,
    RoleName,
    SubscriptionRecord,
    SubscriptionStatus,
)
from shared.config import get_settings


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    email_verified: bool = True,
    full_name: Optional[str] = None,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified
        full_name: Optional display name in user_metadata

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


class FakeRoleRepository:
    """In-memory user_roles table."""

    def __init__(self):
        self.rows: dict[str, RoleAssignment] = {}
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    def get_role(self, user_id: str) -> Optional[RoleAssignment]:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return self.rows.get(user_id)

    def assign_role(self, user_id: str, role: RoleName) -> RoleAssignment:
        if self.error is not None:
            raise self.error
        self.rows[user_id] = RoleAssignment(user_id=user_id, role=role)
        return self.rows[user_id]

    def list_for_users(self, user_ids: list[str]) -> dict[str, RoleAssignment]:
        return {uid: self.rows[uid] for uid in user_ids if uid in self.rows}

    def delete_for_user(self, user_id: str) -> None:
        if self.error is not None:
            raise self.error
        self.rows.pop(user_id, None)


class FakeSubscriptionRepository:
    """In-memory subscriptions table."""

    def __init__(self):
        self.rows: list[SubscriptionRecord] = []
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    def add(self, **fields: Any) -> SubscriptionRecord:
        fields.setdefault("id", str(uuid.uuid4()))
        record = SubscriptionRecord(**fields)
        self.rows.append(record)
        return record

    def get_active_for_user(self, user_id: str) -> Optional[SubscriptionRecord]:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        active = [
            r for r in self.rows
            if r.user_id == user_id
            and r.status == SubscriptionStatus.ACTIVE
            and r.plan_type != PlanType.FREE
        ]
        if not active:
            return None
        # No expiry first, then the latest expiry
        never = [r for r in active if r.expires_at is None]
        if never:
            return never[0]
        return max(active, key=lambda r: r.expires_at)

    def get_by_access_code(self, access_code: str) -> Optional[SubscriptionRecord]:
        code = access_code.strip().upper()
        return next((r for r in self.rows if r.access_code == code), None)

    def get_by_order_id(self, order_id: str) -> Optional[SubscriptionRecord]:
        if self.error is not None:
            raise self.error
        return next((r for r in self.rows if r.order_id == order_id), None)

    def upsert(self, data: dict[str, Any], on_conflict: str = "id") -> SubscriptionRecord:
        if self.error is not None:
            raise self.error
        key = data.get(on_conflict)
        for i, row in enumerate(self.rows):
            if key is not None and getattr(row, on_conflict) == key:
                self.rows[i] = SubscriptionRecord(**{**row.model_dump(), **data})
                return self.rows[i]
        return self.add(**data)

    def bind_to_user(self, access_code: str, user_id: str, email: str) -> Optional[SubscriptionRecord]:
        if self.error is not None:
            raise self.error
        for i, row in enumerate(self.rows):
            if row.access_code == access_code.strip().upper():
                self.rows[i] = row.model_copy(update={"user_id": user_id, "customer_email": email})
                return self.rows[i]
        return None

    def delete(self, subscription_id: str) -> None:
        self.rows = [r for r in self.rows if r.id != subscription_id]

    def delete_for_user(self, user_id: str) -> None:
        if self.error is not None:
            raise self.error
        self.rows = [r for r in self.rows if r.user_id != user_id]

    def list_for_users(self, user_ids: list[str]) -> dict[str, SubscriptionRecord]:
        return {r.user_id: r for r in self.rows if r.user_id in user_ids}


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Point settings at the test JWT secret and reset cached services."""
    monkeypatch.setenv("SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("PAYMENT_WEBHOOK_TOKEN", "")
    monkeypatch.setenv("RESEND_API_KEY", "")
    get_settings.cache_clear()
    reset_container()
    yield get_settings()
    get_settings.cache_clear()
    reset_container()


@pytest.fixture
def role_repo() -> FakeRoleRepository:
    return FakeRoleRepository()


@pytest.fixture
def subscription_repo() -> FakeSubscriptionRepository:
    return FakeSubscriptionRepository()


@pytest.fixture
def lookup_failure() -> LookupFailedError:
    """The error a repository raises when the store is unreachable."""
    return LookupFailedError("connection refused", operation="get_role")


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_token():
    """Factory fixture for tokens with custom claims."""
    return create_test_token
