"""
Billing module.

Handles payment processor webhooks and maps orders onto subscriptions.

Public API:
- IPaymentWebhookService: Interface for order events
- PaymentWebhookService: Supabase-backed implementation
- PaymentWebhookPayload, WebhookResult: Request/response models
- Billing exceptions: PrincipalNotFoundError, WebhookVerificationError
"""

from .interfaces import IPaymentWebhookService
from .models import (
    ORDER_STATUS_MAP,
    OrderStatus,
    PaymentWebhookPayload,
    WebhookResult,
    subscription_status_for,
)
from .exceptions import (
    WebhookError,
    PrincipalNotFoundError,
    WebhookVerificationError,
)
from .service import PaymentWebhookService, generate_access_code

__all__ = [
    # Interface
    "IPaymentWebhookService",
    # Service
    "PaymentWebhookService",
    "generate_access_code",
    # Models
    "ORDER_STATUS_MAP",
    "OrderStatus",
    "PaymentWebhookPayload",
    "WebhookResult",
    "subscription_status_for",
    # Exceptions
    "WebhookError",
    "PrincipalNotFoundError",
    "WebhookVerificationError",
]
