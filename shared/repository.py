"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and translating store failures into DataStoreError.
"""

import logging
from typing import Any, Optional, TypeVar, Generic

from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import DataStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Query execution that distinguishes "no rows" from "store failed"
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class RoleRepository(BaseRepository[RoleAssignment]):
            def get_role(self, user_id: str) -> Optional[RoleAssignment]:
                query = self._db.table("user_roles").select("*").eq("user_id", user_id)
                row = self._first_row(self._execute(query, "get_role"))
                return RoleAssignment(**row) if row else None
    """

    error_class: type[DataStoreError] = DataStoreError

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, query: Any, operation: str) -> Any:
        """
        Execute a PostgREST query builder.

        Args:
            query: Query builder returned by the Supabase client.
            operation: Short name of the calling operation, for logs and errors.

        Returns:
            The PostgREST response.

        Raises:
            DataStoreError (or the subclass in error_class) if the store
            rejects the query or cannot be reached.
        """
        try:
            return query.execute()
        except APIError as e:
            logger.error(f"Data store rejected {operation}: {e.message} (code={e.code})")
            raise self.error_class(
                e.message or str(e),
                operation=operation,
                code=e.code,
            ) from e
        except Exception as e:
            logger.error(f"Data store unreachable during {operation}: {e}")
            raise self.error_class(str(e), operation=operation) from e

    @staticmethod
    def _first_row(result: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a response, or None when empty."""
        if result is None or not result.data:
            return None
        return result.data[0]
