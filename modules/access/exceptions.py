"""
Access module exceptions.

These exceptions are raised by the access module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, AuthorizationError, DataStoreError


class LookupFailedError(DataStoreError):
    """
    Raised when a role or subscription row could not be read.

    Distinct from "no row": the store was unreachable or answered with an
    error (missing table, schema mismatch). AccessContext converts this
    into a failed Lookup instead of letting it reach the caller.
    """

    def __init__(self, message: str, operation: str, code: Optional[str] = None):
        super().__init__(message, operation=operation, code=code or "LOOKUP_FAILED")


class AccessRequiredError(AuthorizationError):
    """
    Raised when a signed-in principal has no entitlement to gated content.

    The UI should respond with the upsell view rather than a sign-in redirect.
    """

    def __init__(self, user_id: str, landing_path: str):
        super().__init__(
            "An active subscription is required to access this content",
            code="ACCESS_REQUIRED",
            details={"user_id": user_id, "upsell_path": landing_path},
        )


class SignInRequiredError(AuthenticationError):
    """Raised when gated content is requested without a session."""

    def __init__(self, redirect_to: str):
        super().__init__(
            "Sign in to access this content",
            code="SIGN_IN_REQUIRED",
            details={"redirect_to": redirect_to},
        )
