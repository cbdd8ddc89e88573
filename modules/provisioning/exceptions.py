"""
Provisioning module exceptions.

A ProvisioningError concerns one record only; the bulk workflow records it
in the result list and moves on.
"""

from shared.exceptions import ChatGateError, ValidationError


class ProvisioningError(ChatGateError):
    """Raised when one account could not be provisioned."""

    def __init__(self, email: str, message: str):
        super().__init__(
            message,
            code="PROVISIONING_FAILED",
            details={"email": email},
        )
        self.email = email


class ImportFileError(ValidationError):
    """Raised when an uploaded import file cannot be read."""

    def __init__(self, filename: str, reason: str):
        super().__init__(
            f"Could not read import file {filename}: {reason}",
            code="INVALID_IMPORT_FILE",
            details={"filename": filename, "reason": reason},
        )
