"""
Billing module exceptions.

These exceptions are raised by the webhook handler and surface to the
payment processor as HTTP error statuses, which it retries.
"""

from shared.exceptions import AuthenticationError, ChatGateError, NotFoundError


class WebhookError(ChatGateError):
    """Base exception for payment webhook errors."""

    pass


class PrincipalNotFoundError(WebhookError, NotFoundError):
    """Raised when no account matches the order's customer email."""

    def __init__(self, email: str, order_id: str):
        super().__init__(
            f"No user registered with email {email}",
            code="PRINCIPAL_NOT_FOUND",
            details={"customer_email": email, "order_id": order_id},
        )


class WebhookVerificationError(WebhookError, AuthenticationError):
    """Raised when the webhook signature does not match the body."""

    def __init__(self):
        super().__init__(
            "Webhook signature verification failed",
            code="WEBHOOK_VERIFICATION_FAILED",
        )
