"""
Provisioning module.

Admin account creation, one at a time or in bulk from an uploaded file.

Public API:
- IAccountProvisioner: Interface for the remote create-user operation
- parse_import_file: Upload -> ImportRecords
- ImportRecord, ImportResult, ImportReport: Bulk workflow data
- ProvisioningThrottle: Token bucket spacing remote calls
"""

from .interfaces import IAccountProvisioner
from .models import (
    CreateUserRequest,
    CreatedAccount,
    ImportPreview,
    ImportRecord,
    ImportReport,
    ImportResult,
    ProvisioningProgress,
    SubscriptionUpdateRequest,
)
from .exceptions import ImportFileError, ProvisioningError
from .parser import parse_import_file
from .throttle import ProvisioningThrottle

__all__ = [
    # Interface
    "IAccountProvisioner",
    # Models
    "CreateUserRequest",
    "CreatedAccount",
    "ImportPreview",
    "ImportRecord",
    "ImportReport",
    "ImportResult",
    "ProvisioningProgress",
    "SubscriptionUpdateRequest",
    # Parsing + throttling
    "parse_import_file",
    "ProvisioningThrottle",
    # Exceptions
    "ImportFileError",
    "ProvisioningError",
]
