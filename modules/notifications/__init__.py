"""
Notifications module.

Transactional email: access codes after payment and credentials for
admin-created accounts.

Public API:
- INotificationService: Interface for sending email
- NotificationError: Raised when delivery fails
"""

from .interfaces import INotificationService
from .exceptions import NotificationError

__all__ = [
    "INotificationService",
    "NotificationError",
]
