"""Tests for the per-session AccessContext."""

import asyncio
import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from modules.access.models import (
    AccessPolicy,
    AccessState,
    LookupFailurePolicy,
    PlanType,
    RoleAssignment,
    RoleName,
    SubscriptionStatus,
)
from modules.access.session import AccessContext
from shared.models import AuthenticatedUser

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def principal():
    return AuthenticatedUser(id="user-1", email="reader@example.com")


@pytest.fixture
def context(role_repo, subscription_repo):
    return AccessContext(
        roles=role_repo,
        subscriptions=subscription_repo,
        policy=AccessPolicy(),
        clock=lambda: NOW,
    )


def _active(user_id: str = "user-1", **overrides) -> dict:
    fields = {
        "user_id": user_id,
        "status": SubscriptionStatus.ACTIVE,
        "plan_type": PlanType.PREMIUM,
        "expires_at": NOW + timedelta(days=1),
    }
    fields.update(overrides)
    return fields


class TestInitialState:
    def test_starts_unresolved(self, context):
        assert context.snapshot.resolved is False
        assert context.principal is None
        assert context.access == AccessState.denied()


class TestSessionEstablished:
    @pytest.mark.asyncio
    async def test_subscribed_principal(self, context, subscription_repo, principal):
        subscription_repo.add(**_active())

        snapshot = await context.session_established(principal)

        assert snapshot.resolved is True
        assert snapshot.principal == principal
        assert snapshot.access.is_subscribed is True
        assert snapshot.access.has_access is True
        assert context.snapshot is snapshot

    @pytest.mark.asyncio
    async def test_admin_principal(self, context, role_repo, principal):
        role_repo.rows["user-1"] = RoleAssignment(user_id="user-1", role=RoleName.ADMIN)

        snapshot = await context.session_established(principal)

        assert snapshot.access.is_admin is True
        assert snapshot.access.has_access is True

    @pytest.mark.asyncio
    async def test_publishes_exactly_once(self, context, subscription_repo, principal):
        subscription_repo.add(**_active())
        published = []
        context.subscribe(published.append)

        await context.session_established(principal)

        assert len(published) == 1
        assert published[0].access.has_access is True

    @pytest.mark.asyncio
    async def test_both_lookups_issued(self, context, role_repo, subscription_repo, principal):
        await context.session_established(principal)

        assert role_repo.calls == ["user-1"]
        assert subscription_repo.calls == ["user-1"]

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self, principal):
        """Each lookup waits for the other to start; sequential lookups would time out."""
        barrier = threading.Barrier(2, timeout=2)

        def get_role(user_id):
            barrier.wait()
            return None

        def get_active_for_user(user_id):
            barrier.wait()
            return None

        roles = MagicMock()
        roles.get_role.side_effect = get_role
        subscriptions = MagicMock()
        subscriptions.get_active_for_user.side_effect = get_active_for_user
        context = AccessContext(roles, subscriptions, AccessPolicy(), clock=lambda: NOW)

        snapshot = await context.session_established(principal)

        assert snapshot.resolved is True
        roles.get_role.assert_called_once_with("user-1")
        assert snapshot.access == AccessState.denied()

    @pytest.mark.asyncio
    async def test_subscription_lookup_failure_fail_closed(
        self, context, subscription_repo, principal, lookup_failure
    ):
        subscription_repo.error = lookup_failure

        snapshot = await context.session_established(principal)

        assert snapshot.resolved is True
        assert snapshot.access.has_access is False

    @pytest.mark.asyncio
    async def test_subscription_lookup_failure_fail_open(
        self, role_repo, subscription_repo, principal, lookup_failure
    ):
        subscription_repo.error = lookup_failure
        context = AccessContext(
            role_repo,
            subscription_repo,
            AccessPolicy(on_lookup_failure=LookupFailurePolicy.FAIL_OPEN),
            clock=lambda: NOW,
        )

        snapshot = await context.session_established(principal)

        assert snapshot.access.is_subscribed is True
        assert snapshot.access.has_access is True

    @pytest.mark.asyncio
    async def test_role_lookup_failure_keeps_subscription(
        self, context, role_repo, subscription_repo, principal, lookup_failure
    ):
        """A failing role lookup does not hide a valid subscription."""
        role_repo.error = lookup_failure
        subscription_repo.add(**_active())

        snapshot = await context.session_established(principal)

        assert snapshot.access.is_admin is False
        assert snapshot.access.has_access is True

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failed_lookup(self, context, role_repo, principal):
        role_repo.error = RuntimeError("boom")

        snapshot = await context.session_established(principal)

        assert snapshot.resolved is True
        assert snapshot.access.is_admin is False

    @pytest.mark.asyncio
    async def test_allowlisted_principal(self, role_repo, subscription_repo, principal):
        context = AccessContext(
            role_repo,
            subscription_repo,
            AccessPolicy(allowlist=frozenset({"reader@example.com"})),
            clock=lambda: NOW,
        )

        snapshot = await context.session_established(principal)

        assert snapshot.access.has_access is True
        assert snapshot.access.is_subscribed is False

    @pytest.mark.asyncio
    async def test_listener_errors_do_not_propagate(self, context, principal):
        def broken(snapshot):
            raise ValueError("listener bug")

        received = []
        context.subscribe(broken)
        context.subscribe(received.append)

        await context.session_established(principal)

        assert len(received) == 1


class TestStaleResults:
    @pytest.mark.asyncio
    async def test_cleared_while_lookups_pending(self, principal):
        """Lookups that finish after sign-out are discarded."""
        gate = threading.Event()

        def slow_role(user_id):
            gate.wait(2)
            return RoleAssignment(user_id=user_id, role=RoleName.ADMIN)

        roles = MagicMock()
        roles.get_role.side_effect = slow_role
        subscriptions = MagicMock()
        subscriptions.get_active_for_user.return_value = None
        context = AccessContext(roles, subscriptions, AccessPolicy(), clock=lambda: NOW)
        published = []
        context.subscribe(published.append)

        task = asyncio.create_task(context.session_established(principal))
        await asyncio.sleep(0.05)
        context.session_cleared()
        gate.set()
        await task

        assert len(published) == 1
        assert published[0].principal is None
        assert context.snapshot.access == AccessState.denied()

    @pytest.mark.asyncio
    async def test_replaced_session_keeps_latest(self, subscription_repo):
        """When a second session starts first-lookup-last, the second one wins."""
        gate = threading.Event()
        first = AuthenticatedUser(id="user-1", email="first@example.com")
        second = AuthenticatedUser(id="user-2", email="second@example.com")

        def get_role(user_id):
            if user_id == "user-1":
                gate.wait(2)
                return RoleAssignment(user_id=user_id, role=RoleName.ADMIN)
            return None

        roles = MagicMock()
        roles.get_role.side_effect = get_role
        context = AccessContext(roles, subscription_repo, AccessPolicy(), clock=lambda: NOW)

        first_task = asyncio.create_task(context.session_established(first))
        await asyncio.sleep(0.05)
        await context.session_established(second)
        gate.set()
        await first_task

        assert context.principal == second
        assert context.snapshot.principal == second
        assert context.access.is_admin is False


class TestSessionCleared:
    def test_publishes_denied_synchronously(self, context, role_repo, subscription_repo):
        published = []
        context.subscribe(published.append)

        snapshot = context.session_cleared()

        assert snapshot.resolved is True
        assert snapshot.principal is None
        assert snapshot.access == AccessState.denied()
        assert published == [snapshot]
        assert role_repo.calls == []
        assert subscription_repo.calls == []

    @pytest.mark.asyncio
    async def test_clears_previous_access(self, context, subscription_repo, principal):
        subscription_repo.add(**_active())
        await context.session_established(principal)

        snapshot = context.session_cleared()

        assert snapshot.access == AccessState.denied()
        assert context.principal is None


class TestRefresh:
    @pytest.mark.asyncio
    async def test_picks_up_promotion(self, context, role_repo, subscription_repo, principal):
        await context.session_established(principal)
        assert context.access.is_admin is False

        role_repo.rows["user-1"] = RoleAssignment(user_id="user-1", role=RoleName.ADMIN)
        snapshot = await context.refresh()

        assert snapshot.access.is_admin is True
        assert snapshot.access.has_access is True
        # Only the role is re-read
        assert subscription_repo.calls == ["user-1"]
        assert role_repo.calls == ["user-1", "user-1"]

    @pytest.mark.asyncio
    async def test_keeps_subscription_result(self, context, subscription_repo, principal):
        subscription_repo.add(**_active())
        await context.session_established(principal)

        snapshot = await context.refresh()

        assert snapshot.access.is_subscribed is True

    @pytest.mark.asyncio
    async def test_without_session_is_noop(self, context, role_repo):
        snapshot = await context.refresh()

        assert snapshot.resolved is False
        assert role_repo.calls == []


class TestSubscribeAndClose:
    def test_unsubscribe(self, context):
        published = []
        unsubscribe = context.subscribe(published.append)
        unsubscribe()

        context.session_cleared()

        assert published == []

    def test_unsubscribe_twice_is_harmless(self, context):
        unsubscribe = context.subscribe(lambda s: None)
        unsubscribe()
        unsubscribe()

    @pytest.mark.asyncio
    async def test_close_drops_listeners_and_state(self, context, subscription_repo, principal):
        subscription_repo.add(**_active())
        published = []
        context.subscribe(published.append)
        await context.session_established(principal)

        context.close()
        context.session_cleared()

        assert len(published) == 1
        assert context.principal is None
