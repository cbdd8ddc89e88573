"""
Provisioning service implementation.

AccountProvisioner performs the remote create-user operation for one
account. BulkProvisioningService runs it over an import list, one record
at a time, behind a throttle, isolating each record's failure.
"""

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from shared.exceptions import DataStoreError
from modules.access.interfaces import IRoleRepository, ISubscriptionRepository
from modules.access.models import (
    PlanType,
    RoleName,
    SubscriptionRecord,
    SubscriptionStatus,
)
from modules.auth.interfaces import IAuthService
from modules.notifications.exceptions import NotificationError
from modules.notifications.interfaces import INotificationService

from .exceptions import ProvisioningError
from .interfaces import IAccountProvisioner
from .models import (
    CreatedAccount,
    ImportRecord,
    ImportReport,
    ImportResult,
    ProvisioningProgress,
)
from .throttle import ProvisioningThrottle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProvisioningProgress], None]

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length: int = 12) -> str:
    """Random password with at least one lower, one upper and one digit."""
    while True:
        password = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
        ):
            return password


class AccountProvisioner(IAccountProvisioner):
    """
    Creates an account the way the admin dashboard does.

    Steps: identity with email confirmed, admin role row when requested,
    an active subscription for paid plans, then a credentials email. The
    email is best-effort: the account already exists when it is sent.
    """

    def __init__(
        self,
        auth: IAuthService,
        roles: IRoleRepository,
        subscriptions: ISubscriptionRepository,
        notifications: INotificationService,
        subscription_period_days: int = 30,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._auth = auth
        self._roles = roles
        self._subscriptions = subscriptions
        self._notifications = notifications
        self._period = timedelta(days=subscription_period_days)
        self._clock = clock

    async def create_account(
        self,
        record: ImportRecord,
        password: Optional[str] = None,
    ) -> CreatedAccount:
        password = password or generate_temporary_password()

        user = await self._auth.create_user(
            record.email,
            password,
            metadata={"full_name": record.full_name},
        )

        try:
            if record.role == RoleName.ADMIN:
                self._roles.assign_role(user.id, RoleName.ADMIN)

            subscription = None
            if record.plan_type != PlanType.FREE:
                subscription = self._subscriptions.upsert({
                    "user_id": user.id,
                    "customer_email": record.email,
                    "customer_name": record.full_name,
                    "plan_type": record.plan_type.value,
                    "status": SubscriptionStatus.ACTIVE.value,
                    "expires_at": (self._clock() + self._period).isoformat(),
                })
        except DataStoreError as e:
            raise ProvisioningError(
                record.email,
                f"User {user.id} created but role/subscription setup failed: {e.message}",
            ) from e

        credentials_sent = False
        try:
            credentials_sent = await self._notifications.send_credentials(
                record.email,
                record.full_name,
                password,
                record.role.value,
                record.plan_type.value,
            )
        except NotificationError as e:
            logger.warning(f"Account {user.id} created but credentials email failed: {e.message}")

        return CreatedAccount(
            user=user,
            role=record.role,
            plan_type=record.plan_type,
            subscription=subscription,
            credentials_sent=credentials_sent,
        )

    async def set_subscription(
        self,
        user_id: str,
        plan_type: PlanType,
        status: SubscriptionStatus,
    ) -> SubscriptionRecord:
        """
        Admin change of a user's plan/status.

        Active subscriptions get a fresh period from now; other statuses
        clear the expiry.
        """
        existing = self._subscriptions.list_for_users([user_id]).get(user_id)
        data = {
            "user_id": user_id,
            "plan_type": plan_type.value,
            "status": status.value,
            "expires_at": (
                (self._clock() + self._period).isoformat()
                if status == SubscriptionStatus.ACTIVE
                else None
            ),
        }
        if existing is not None and existing.id:
            data["id"] = existing.id
        record = self._subscriptions.upsert(data)
        logger.info(f"Set subscription for user {user_id}: {plan_type.value}/{status.value}")
        return record


class BulkProvisioningService:
    """
    Sequential bulk account creation.

    Records are processed strictly in input order with at most one remote
    call in flight. Each call waits on the throttle first. A failing record
    is recorded with the provider's message and the run continues. There is
    no de-duplication and no resume: running the same list again attempts
    every record again.
    """

    def __init__(
        self,
        provisioner: IAccountProvisioner,
        throttle: ProvisioningThrottle,
    ):
        self._provisioner = provisioner
        self._throttle = throttle

    async def run(
        self,
        records: Iterable[ImportRecord],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportReport:
        """
        Provision every record.

        Args:
            records: Accounts to create, in order
            on_progress: Called after each record with the new progress

        Returns:
            ImportReport with one result per input record
        """
        records = list(records)
        report = ImportReport(total=len(records))
        logger.info(f"Starting bulk provisioning of {len(records)} accounts")

        for record in records:
            await self._throttle.acquire()
            try:
                await self._provisioner.create_account(record)
            except Exception as e:
                message = getattr(e, "message", None) or str(e) or e.__class__.__name__
                logger.warning(f"Provisioning failed for {record.email}: {message}")
                report.results.append(ImportResult(email=record.email, success=False, error=message))
            else:
                report.results.append(ImportResult(email=record.email, success=True))

            if on_progress is not None:
                on_progress(ProvisioningProgress(completed=len(report.results), total=report.total))

        logger.info(
            f"Bulk provisioning finished: {report.success_count} succeeded, "
            f"{report.failure_count} failed"
        )
        return report
