"""
Access module interfaces.

The session context depends on these protocols rather than on the
Supabase repositories, so tests can drive it with fakes.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import RoleAssignment, RoleName, SubscriptionRecord


@runtime_checkable
class IRoleRepository(Protocol):
    """Read and write access to the user_roles table."""

    def get_role(self, user_id: str) -> Optional[RoleAssignment]:
        """
        Get the role row for a principal.

        Returns:
            RoleAssignment if a row exists, None otherwise

        Raises:
            LookupFailedError: If the store could not answer
        """
        ...

    def assign_role(self, user_id: str, role: RoleName) -> RoleAssignment:
        """Create or replace the role row for a principal."""
        ...

    def list_for_users(self, user_ids: list[str]) -> dict[str, RoleAssignment]:
        """Map user ID to role row for the given principals."""
        ...

    def delete_for_user(self, user_id: str) -> None:
        """Remove the principal's role row, if any."""
        ...


@runtime_checkable
class ISubscriptionRepository(Protocol):
    """Read and write access to the subscriptions table."""

    def get_active_for_user(self, user_id: str) -> Optional[SubscriptionRecord]:
        """
        Get the principal's active paid subscription, latest expiry first.

        Raises:
            LookupFailedError: If the store could not answer
        """
        ...

    def get_by_access_code(self, access_code: str) -> Optional[SubscriptionRecord]:
        """Get the subscription issued with an access code."""
        ...

    def get_by_order_id(self, order_id: str) -> Optional[SubscriptionRecord]:
        """Get the subscription created for a payment order."""
        ...

    def upsert(self, data: dict[str, Any], on_conflict: str = "id") -> SubscriptionRecord:
        """Insert or update a subscription row."""
        ...

    def bind_to_user(self, access_code: str, user_id: str, email: str) -> Optional[SubscriptionRecord]:
        """Link the subscription holding access_code to a principal."""
        ...

    def delete(self, subscription_id: str) -> None:
        """Hard-delete a subscription row."""
        ...

    def delete_for_user(self, user_id: str) -> None:
        """Hard-delete every subscription row linked to a principal."""
        ...

    def list_for_users(self, user_ids: list[str]) -> dict[str, SubscriptionRecord]:
        """Map user ID to the latest subscription row for the given principals."""
        ...
