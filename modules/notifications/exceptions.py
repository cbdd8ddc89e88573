"""
Notifications module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError


class NotificationError(ExternalServiceError):
    """Raised when the email provider rejects or fails a send."""

    def __init__(self, message: str, recipient: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            service="resend",
            code="NOTIFICATION_FAILED",
            details={"recipient": recipient, "status_code": status_code},
        )
