"""
Provisioning module data models.

Import records come from an uploaded file; results and reports exist only
for the duration of one import run and are returned to the admin UI.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, computed_field

from modules.access.models import PlanType, RoleName, SubscriptionRecord, SubscriptionStatus
from modules.auth.models import IdentityUser


class ImportRecord(BaseModel):
    """
    One account to create.

    The email is deliberately not validated here: malformed or duplicate
    addresses go through and fail individually at the identity provider.
    """

    email: str = Field(..., description="Email of the account to create")
    full_name: str = Field(..., description="Display name")
    role: RoleName = Field(default=RoleName.USER)
    plan_type: PlanType = Field(default=PlanType.FREE)


class ImportResult(BaseModel):
    """Outcome of provisioning one record."""

    email: str
    success: bool
    error: Optional[str] = None


class ProvisioningProgress(BaseModel):
    """Progress after a record finishes."""

    completed: int
    total: int

    @computed_field
    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return (self.completed / self.total) * 100


class ImportReport(BaseModel):
    """
    Itemized result of an import run.

    Counts are derived from the results list so totals can never disagree
    with the itemized rows.
    """

    total: int
    results: list[ImportResult] = Field(default_factory=list)

    @computed_field
    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @computed_field
    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @computed_field
    @property
    def percent(self) -> float:
        return ProvisioningProgress(completed=len(self.results), total=self.total).percent


class ImportPreview(BaseModel):
    """Records parsed from an upload, before anything is created."""

    records: list[ImportRecord]
    total: int


class CreateUserRequest(BaseModel):
    """Admin request to create one account."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    password: Optional[str] = Field(
        None,
        min_length=6,
        description="Initial password; a temporary one is generated when omitted",
    )
    role: RoleName = Field(default=RoleName.USER)
    plan_type: PlanType = Field(default=PlanType.FREE)


class CreatedAccount(BaseModel):
    """Everything created for one provisioned account."""

    user: IdentityUser
    role: RoleName
    plan_type: PlanType
    subscription: Optional[SubscriptionRecord] = None
    credentials_sent: bool = False


class SubscriptionUpdateRequest(BaseModel):
    """Admin change of a user's plan or status."""

    plan_type: PlanType
    status: SubscriptionStatus
