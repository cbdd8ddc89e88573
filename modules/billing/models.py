"""
Billing module data models.

These models define the payment processor's webhook payload and what the
webhook handler returns.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from modules.access.models import SubscriptionRecord, SubscriptionStatus


class OrderStatus(str, Enum):
    """Order statuses reported by the payment processor."""

    PAID = "paid"
    APPROVED = "approved"
    WAITING_PAYMENT = "waiting_payment"
    PENDING = "pending"
    REFUSED = "refused"
    REFUNDED = "refunded"
    CHARGEDBACK = "chargedback"
    CANCELED = "canceled"


# Order status -> subscription status. Unlisted statuses map to PENDING.
ORDER_STATUS_MAP = {
    OrderStatus.PAID.value: SubscriptionStatus.ACTIVE,
    OrderStatus.APPROVED.value: SubscriptionStatus.ACTIVE,
    OrderStatus.REFUNDED.value: SubscriptionStatus.INACTIVE,
    OrderStatus.CHARGEDBACK.value: SubscriptionStatus.INACTIVE,
    OrderStatus.CANCELED.value: SubscriptionStatus.INACTIVE,
}


def subscription_status_for(order_status: str) -> SubscriptionStatus:
    return ORDER_STATUS_MAP.get(order_status.strip().lower(), SubscriptionStatus.PENDING)


class PaymentWebhookPayload(BaseModel):
    """
    Order event posted by the payment processor.

    order_status is kept as a free string; unknown statuses are treated as
    pending rather than rejected, so the processor does not retry forever.
    """

    order_id: str = Field(..., min_length=1)
    order_status: str = Field(..., min_length=1)
    customer_email: str = Field(..., min_length=3)
    customer_name: Optional[str] = None
    product_id: str
    product_name: str
    created_at: str
    updated_at: str

    model_config = {"extra": "ignore"}


class WebhookResult(BaseModel):
    """Response body for a processed order event."""

    success: bool = True
    message: str = "Webhook processed successfully"
    access_code: Optional[str] = None
    subscription: SubscriptionRecord
