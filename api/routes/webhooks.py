"""
Payment processor webhook endpoint.

The processor retries on any non-2xx response, so only real failures
(unknown customer, bad signature, store errors) return one.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from modules.billing.interfaces import IPaymentWebhookService
from modules.billing.models import PaymentWebhookPayload, WebhookResult

from ..dependencies import get_webhook_service

router = APIRouter()


@router.post("/payments", response_model=WebhookResult)
async def handle_payment_webhook(
    payload: PaymentWebhookPayload,
    request: Request,
    signature: Optional[str] = Query(default=None, description="HMAC-SHA1 of the raw body"),
    service: IPaymentWebhookService = Depends(get_webhook_service),
) -> WebhookResult:
    """
    Apply an order event to the customer's subscription.

    Paid orders activate a 30-day premium subscription and email the
    customer their access code. Returns 404 when no account uses the
    order's email.
    """
    service.verify_signature(await request.body(), signature)
    return await service.handle_order_event(payload)
