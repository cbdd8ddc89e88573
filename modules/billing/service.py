"""
Payment webhook service implementation.

Turns order events from the payment processor into subscription rows.
Each order maps to exactly one row (upsert on order_id), and a row keeps
the access code it was first issued with.
"""

import hashlib
import hmac
import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from modules.access.interfaces import ISubscriptionRepository
from modules.access.models import SubscriptionStatus
from modules.auth.interfaces import IAuthService
from modules.notifications.exceptions import NotificationError
from modules.notifications.interfaces import INotificationService

from .exceptions import PrincipalNotFoundError, WebhookVerificationError
from .interfaces import IPaymentWebhookService
from .models import PaymentWebhookPayload, WebhookResult, subscription_status_for

logger = logging.getLogger(__name__)

ACCESS_CODE_PREFIX = "START-"
ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_LENGTH = 8


def generate_access_code() -> str:
    """Access code handed to a paying customer, e.g. START-7QK2M9XA."""
    suffix = "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LENGTH))
    return f"{ACCESS_CODE_PREFIX}{suffix}"


class PaymentWebhookService(IPaymentWebhookService):
    """
    Handles payment processor order events.

    paid/approved orders become active subscriptions for the configured
    period, refunds and cancellations become inactive, anything else is
    recorded as pending.
    """

    def __init__(
        self,
        auth: IAuthService,
        subscriptions: ISubscriptionRepository,
        notifications: INotificationService,
        webhook_token: str = "",
        plan_type: str = "premium",
        subscription_period_days: int = 30,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._auth = auth
        self._subscriptions = subscriptions
        self._notifications = notifications
        self._webhook_token = webhook_token
        self._plan_type = plan_type
        self._period = timedelta(days=subscription_period_days)
        self._clock = clock

    @property
    def verification_enabled(self) -> bool:
        return bool(self._webhook_token)

    def verify_signature(self, body: bytes, signature: Optional[str]) -> None:
        if not self.verification_enabled:
            return
        if not signature:
            raise WebhookVerificationError()

        expected = hmac.new(self._webhook_token.encode(), body, hashlib.sha1).hexdigest()
        if not hmac.compare_digest(expected, signature.strip().lower()):
            logger.warning("Rejected payment webhook with bad signature")
            raise WebhookVerificationError()

    async def handle_order_event(self, payload: PaymentWebhookPayload) -> WebhookResult:
        email = payload.customer_email.strip().lower()
        logger.info(f"Payment webhook: order {payload.order_id} is {payload.order_status}")

        user = await self._auth.get_user_by_email(email)
        if user is None:
            logger.warning(f"Payment webhook: no user for {email} (order {payload.order_id})")
            raise PrincipalNotFoundError(email, payload.order_id)

        status = subscription_status_for(payload.order_status)
        existing = self._subscriptions.get_by_order_id(payload.order_id)
        access_code = (
            existing.access_code
            if existing is not None and existing.access_code
            else generate_access_code()
        )

        expires_at = None
        if status == SubscriptionStatus.ACTIVE:
            expires_at = (self._clock() + self._period).isoformat()

        subscription = self._subscriptions.upsert(
            {
                "user_id": user.id,
                "customer_email": email,
                "customer_name": payload.customer_name or user.full_name,
                "order_id": payload.order_id,
                "status": status.value,
                "plan_type": self._plan_type,
                "access_code": access_code,
                "expires_at": expires_at,
            },
            on_conflict="order_id",
        )
        logger.info(
            f"Subscription for order {payload.order_id} set to {status.value} (user {user.id})"
        )

        if status == SubscriptionStatus.ACTIVE:
            await self._send_access_code(email, payload.customer_name or user.full_name, access_code)

        return WebhookResult(access_code=access_code, subscription=subscription)

    async def _send_access_code(self, email: str, name: Optional[str], access_code: str) -> None:
        try:
            await self._notifications.send_access_code(email, name or email, access_code)
        except NotificationError as e:
            logger.warning(f"Access code email to {email} failed: {e.message}")
