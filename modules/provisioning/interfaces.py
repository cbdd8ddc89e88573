"""
Provisioning module interface.

The bulk workflow depends on IAccountProvisioner for the remote
create-user operation, so tests can script per-record failures.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import CreatedAccount, ImportRecord


@runtime_checkable
class IAccountProvisioner(Protocol):
    """Creates one account with its role and subscription rows."""

    async def create_account(
        self,
        record: ImportRecord,
        password: Optional[str] = None,
    ) -> CreatedAccount:
        """
        Create the identity, role row and subscription for one record.

        Args:
            record: The account to create
            password: Initial password; generated when omitted

        Returns:
            CreatedAccount describing what was created

        Raises:
            Any provider error; callers isolate failures per record
        """
        ...
