"""
Exception hierarchy for the ChatGate backend.

Modules raise subclasses of these bases; the API layer maps each base to
one HTTP status, so a module never needs to know about HTTP.
"""

from typing import Optional, Any


class ChatGateError(Exception):
    """
    Root of every error the backend raises on purpose.

    Attributes:
        message: Human-readable text, safe to show to the caller
        code: Stable machine-readable identifier, e.g. ACCESS_REQUIRED
        details: Extra context for the response body
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ChatGateError):
    """No principal, subscription or row matched."""

    pass


class ValidationError(ChatGateError):
    """Input was well-formed but rejected, e.g. a bad access code or import file."""

    pass


class AuthenticationError(ChatGateError):
    """No usable session: missing, invalid or expired token, or a bad signature."""

    pass


class AuthorizationError(ChatGateError):
    """Signed in, but not an admin or without an entitlement."""

    pass


class ExternalServiceError(ChatGateError):
    """A dependency (Supabase, the email provider) failed or refused."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class DataStoreError(ExternalServiceError):
    """The Supabase data store rejected or failed a query."""

    def __init__(self, message: str, operation: str, code: Optional[str] = None):
        super().__init__(
            message,
            service="supabase",
            code=code or "DATA_STORE_ERROR",
            details={"operation": operation},
        )
        self.operation = operation
