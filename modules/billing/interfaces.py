"""
Billing module interface.

The webhook route depends on IPaymentWebhookService, not the concrete
implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import PaymentWebhookPayload, WebhookResult


@runtime_checkable
class IPaymentWebhookService(Protocol):
    """
    Interface for payment processor events.

    Maps order events onto subscription rows.
    """

    def verify_signature(self, body: bytes, signature: Optional[str]) -> None:
        """
        Check the signature the processor attached to a webhook body.

        Raises:
            WebhookVerificationError: If verification is enabled and fails
        """
        ...

    async def handle_order_event(self, payload: PaymentWebhookPayload) -> WebhookResult:
        """
        Apply an order event to the subscription store.

        Args:
            payload: The order event

        Returns:
            WebhookResult with the upserted subscription

        Raises:
            PrincipalNotFoundError: If no account matches customer_email
        """
        ...
