"""
Email notifications over the Resend HTTP API.

Messages are plain text. Without an API key the service logs and skips
sending, so local development works without an email account.
"""

import logging
from typing import Optional

import httpx

from .interfaces import INotificationService
from .exceptions import NotificationError

logger = logging.getLogger(__name__)


class EmailService(INotificationService):
    """Sends transactional email through Resend."""

    RESEND_API_URL = "https://api.resend.com/emails"

    def __init__(
        self,
        api_key: str,
        sender: str,
        frontend_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self._api_key = api_key
        self._sender = sender
        self._frontend_url = frontend_url.rstrip("/")
        self._http_client = http_client
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send_access_code(self, email: str, name: str, access_code: str) -> bool:
        body = (
            f"Hello {name},\n\n"
            "Your payment was confirmed. Use this access code to create your account:\n\n"
            f"    {access_code}\n\n"
            f"Sign up at {self._frontend_url}/auth and enter the code when asked.\n"
        )
        return await self._send(email, "Your access code", body)

    async def send_credentials(
        self,
        email: str,
        full_name: str,
        temporary_password: str,
        role: str,
        plan_type: str,
    ) -> bool:
        body = (
            f"Hello {full_name},\n\n"
            "An account was created for you.\n\n"
            f"Email: {email}\n"
            f"Temporary password: {temporary_password}\n"
            f"Role: {role}\n"
            f"Plan: {plan_type}\n\n"
            f"Sign in at {self._frontend_url}/auth and change your password on first access.\n"
        )
        return await self._send(email, "Your account credentials", body)

    async def send_password_reset(self, email: str, reset_link: str) -> bool:
        body = (
            "We received a request to reset the password of your account.\n\n"
            f"Choose a new password here:\n\n    {reset_link}\n\n"
            "The link expires in one hour. If you did not ask for this, ignore this email;\n"
            "your password stays the same.\n"
        )
        return await self._send(email, "Reset your password", body)

    async def _send(self, recipient: str, subject: str, text: str) -> bool:
        if not self.is_configured:
            logger.warning(f"RESEND_API_KEY not configured, skipping email to {recipient}")
            return False

        payload = {
            "from": self._sender,
            "to": [recipient],
            "subject": subject,
            "text": text,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.RESEND_API_URL, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        self.RESEND_API_URL, json=payload, headers=headers, timeout=self._timeout
                    )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Email provider rejected message: {e.response.text}",
                recipient=recipient,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(f"Email provider unreachable: {e}", recipient=recipient) from e

        logger.info(f"Sent '{subject}' email to {recipient}")
        return True
