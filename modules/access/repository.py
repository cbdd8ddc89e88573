"""
Role and subscription repositories.

Encapsulates all Supabase queries and data mapping for the tables the
access decision reads:
- user_roles
- subscriptions
"""

from datetime import datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository
from .exceptions import LookupFailedError
from .models import PlanType, RoleAssignment, RoleName, SubscriptionRecord, SubscriptionStatus


class RoleRepository(BaseRepository[RoleAssignment]):
    """
    Repository for the user_roles table.

    Absence of a row means the principal is a plain user.
    """

    error_class = LookupFailedError

    def get_role(self, user_id: str) -> Optional[RoleAssignment]:
        query = (
            self._db.table("user_roles")
            .select("user_id, role")
            .eq("user_id", user_id)
            .limit(1)
        )
        row = self._first_row(self._execute(query, "get_role"))
        return RoleAssignment(**row) if row else None

    def assign_role(self, user_id: str, role: RoleName) -> RoleAssignment:
        data = {
            "user_id": user_id,
            "role": role.value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        query = self._db.table("user_roles").upsert(data, on_conflict="user_id")
        row = self._first_row(self._execute(query, "assign_role"))
        return RoleAssignment(**row) if row else RoleAssignment(user_id=user_id, role=role)

    def list_for_users(self, user_ids: list[str]) -> dict[str, RoleAssignment]:
        """Map user ID to role row for the given principals."""
        if not user_ids:
            return {}
        query = self._db.table("user_roles").select("user_id, role").in_("user_id", user_ids)
        result = self._execute(query, "list_roles")
        return {row["user_id"]: RoleAssignment(**row) for row in result.data or []}

    def delete_for_user(self, user_id: str) -> None:
        query = self._db.table("user_roles").delete().eq("user_id", user_id)
        self._execute(query, "delete_role")


class SubscriptionRepository(BaseRepository[SubscriptionRecord]):
    """
    Repository for the subscriptions table.

    Note: This repository does NOT check who is asking.
    Callers are responsible for admin checks on mutations.
    """

    error_class = LookupFailedError

    def get_active_for_user(self, user_id: str) -> Optional[SubscriptionRecord]:
        query = (
            self._db.table("subscriptions")
            .select("*")
            .eq("user_id", user_id)
            .eq("status", SubscriptionStatus.ACTIVE.value)
            .neq("plan_type", PlanType.FREE.value)
            .order("expires_at", desc=True, nullsfirst=True)
            .limit(1)
        )
        row = self._first_row(self._execute(query, "get_active_subscription"))
        return SubscriptionRecord(**row) if row else None

    def get_by_access_code(self, access_code: str) -> Optional[SubscriptionRecord]:
        query = (
            self._db.table("subscriptions")
            .select("*")
            .eq("access_code", access_code.strip().upper())
            .limit(1)
        )
        row = self._first_row(self._execute(query, "get_subscription_by_code"))
        return SubscriptionRecord(**row) if row else None

    def get_by_order_id(self, order_id: str) -> Optional[SubscriptionRecord]:
        query = self._db.table("subscriptions").select("*").eq("order_id", order_id).limit(1)
        row = self._first_row(self._execute(query, "get_subscription_by_order"))
        return SubscriptionRecord(**row) if row else None

    def upsert(self, data: dict[str, Any], on_conflict: str = "id") -> SubscriptionRecord:
        payload = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        query = self._db.table("subscriptions").upsert(payload, on_conflict=on_conflict)
        row = self._first_row(self._execute(query, "upsert_subscription"))
        return SubscriptionRecord(**(row or payload))

    def bind_to_user(
        self,
        access_code: str,
        user_id: str,
        email: str,
    ) -> Optional[SubscriptionRecord]:
        now = datetime.now(timezone.utc).isoformat()
        query = (
            self._db.table("subscriptions")
            .update({
                "user_id": user_id,
                "customer_email": email,
                "registration_completed_at": now,
                "updated_at": now,
            })
            .eq("access_code", access_code.strip().upper())
        )
        row = self._first_row(self._execute(query, "bind_subscription"))
        return SubscriptionRecord(**row) if row else None

    def delete(self, subscription_id: str) -> None:
        query = self._db.table("subscriptions").delete().eq("id", subscription_id)
        self._execute(query, "delete_subscription")

    def delete_for_user(self, user_id: str) -> None:
        query = self._db.table("subscriptions").delete().eq("user_id", user_id)
        self._execute(query, "delete_user_subscriptions")

    def list_for_users(self, user_ids: list[str]) -> dict[str, SubscriptionRecord]:
        """Map user ID to subscription row; the latest updated row wins."""
        if not user_ids:
            return {}
        query = (
            self._db.table("subscriptions")
            .select("*")
            .in_("user_id", user_ids)
            .order("updated_at", desc=False)
        )
        result = self._execute(query, "list_subscriptions")
        return {row["user_id"]: SubscriptionRecord(**row) for row in result.data or []}
