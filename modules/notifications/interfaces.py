"""
Notifications module interface.

Provisioning and billing send mail through INotificationService so they
can be tested without an email provider.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class INotificationService(Protocol):
    """Outbound transactional email."""

    async def send_access_code(self, email: str, name: str, access_code: str) -> bool:
        """
        Send the access code a buyer needs to register.

        Returns:
            True if sent, False if email delivery is not configured

        Raises:
            NotificationError: If the provider rejects the message
        """
        ...

    async def send_credentials(
        self,
        email: str,
        full_name: str,
        temporary_password: str,
        role: str,
        plan_type: str,
    ) -> bool:
        """
        Send sign-in credentials for an admin-created account.

        Returns:
            True if sent, False if email delivery is not configured

        Raises:
            NotificationError: If the provider rejects the message
        """
        ...

    async def send_password_reset(self, email: str, reset_link: str) -> bool:
        """
        Send a password recovery link.

        Returns:
            True if sent, False if email delivery is not configured

        Raises:
            NotificationError: If the provider rejects the message
        """
        ...
