"""
Session authorization context.

Bridges identity-provider session events into the access decision and
republishes the derived state to subscribers. One AccessContext exists per
session (or per request on the HTTP side): it is created when the session
starts and closed at sign-out, never shared through module state.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from shared.models import AuthenticatedUser

from .decision import compute_access
from .interfaces import IRoleRepository, ISubscriptionRepository
from .models import (
    AccessPolicy,
    AccessState,
    AuthorizationSnapshot,
    Lookup,
    RoleAssignment,
    SubscriptionRecord,
)

logger = logging.getLogger(__name__)

Listener = Callable[[AuthorizationSnapshot], None]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessContext:
    """
    Observable authorization state for one session.

    Role and subscription lookups run concurrently, and exactly one
    snapshot is published once both have settled. A lookup that raises is
    logged and degraded to Lookup.failed; the AccessPolicy decides what a
    failed subscription lookup means.

    Lookups started for a session that has since been cleared or replaced
    are discarded when they complete.
    """

    def __init__(
        self,
        roles: IRoleRepository,
        subscriptions: ISubscriptionRepository,
        policy: AccessPolicy,
        clock: Clock = _utcnow,
    ):
        self._roles = roles
        self._subscriptions = subscriptions
        self._policy = policy
        self._clock = clock

        self._listeners: list[Listener] = []
        self._snapshot = AuthorizationSnapshot()
        self._principal: Optional[AuthenticatedUser] = None
        self._role_lookup: Lookup[RoleAssignment] = Lookup.not_found()
        self._subscription_lookup: Lookup[SubscriptionRecord] = Lookup.not_found()
        # Bumped on every session change; stale lookups compare against it
        self._generation = 0

    @property
    def snapshot(self) -> AuthorizationSnapshot:
        return self._snapshot

    @property
    def principal(self) -> Optional[AuthenticatedUser]:
        return self._principal

    @property
    def access(self) -> AccessState:
        return self._snapshot.access

    @property
    def policy(self) -> AccessPolicy:
        return self._policy

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for published snapshots.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def session_established(self, principal: AuthenticatedUser) -> AuthorizationSnapshot:
        """
        Resolve access for a newly established session and publish it.

        Args:
            principal: The signed-in principal

        Returns:
            The published snapshot, or the current one if this session was
            superseded while its lookups were in flight.
        """
        self._generation += 1
        generation = self._generation
        self._principal = principal

        role, subscription = await asyncio.gather(
            self._lookup(self._roles.get_role, principal.id, "role"),
            self._lookup(self._subscriptions.get_active_for_user, principal.id, "subscription"),
        )

        if generation != self._generation:
            logger.debug(f"Discarding stale access lookups for user {principal.id}")
            return self._snapshot

        self._role_lookup = role
        self._subscription_lookup = subscription
        return self._decide_and_publish()

    def session_cleared(self) -> AuthorizationSnapshot:
        """Publish the signed-out state immediately, without lookups."""
        self._generation += 1
        self._principal = None
        self._role_lookup = Lookup.not_found()
        self._subscription_lookup = Lookup.not_found()
        return self._publish(
            AuthorizationSnapshot(principal=None, access=AccessState.denied(), resolved=True)
        )

    async def refresh(self) -> AuthorizationSnapshot:
        """
        Re-run the role lookup and republish.

        Used after a promotion so the new admin does not need to sign in again.
        The last subscription lookup is reused.
        """
        principal = self._principal
        if principal is None:
            return self._snapshot

        generation = self._generation
        role = await self._lookup(self._roles.get_role, principal.id, "role")

        if generation != self._generation:
            return self._snapshot

        self._role_lookup = role
        return self._decide_and_publish()

    def close(self) -> None:
        """Tear down the context at sign-out or end of request."""
        self._generation += 1
        self._listeners.clear()
        self._principal = None
        self._snapshot = AuthorizationSnapshot()

    async def _lookup(
        self,
        fetch: Callable[[str], Any],
        user_id: str,
        what: str,
    ) -> Lookup[Any]:
        try:
            value = await asyncio.to_thread(fetch, user_id)
        except Exception as e:
            logger.warning(f"{what.capitalize()} lookup failed for user {user_id}: {e}")
            return Lookup.failed(str(e))
        return Lookup.of(value)

    def _decide_and_publish(self) -> AuthorizationSnapshot:
        if self._subscription_lookup.is_failed:
            logger.warning(
                f"Deciding access for user {self._principal.id} with a failed subscription "
                f"lookup under policy {self._policy.on_lookup_failure.value}"
            )
        access = compute_access(
            self._principal,
            self._role_lookup,
            self._subscription_lookup,
            self._clock(),
            policy=self._policy,
        )
        return self._publish(
            AuthorizationSnapshot(principal=self._principal, access=access, resolved=True)
        )

    def _publish(self, snapshot: AuthorizationSnapshot) -> AuthorizationSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Access state listener raised")
        return snapshot
