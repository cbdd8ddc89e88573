"""
Admin endpoints.

User management for the admin dashboard: listing, creating and deleting
accounts, promotions, subscription changes and bulk import. Every route
requires an administrator.
"""

import asyncio
import logging
from datetime import datetime
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel, EmailStr
from sse_starlette.sse import EventSourceResponse

from modules.access.interfaces import IRoleRepository, ISubscriptionRepository
from modules.access.models import RoleName, SubscriptionRecord
from modules.auth.interfaces import IAuthService
from modules.auth.models import IdentityUser
from modules.provisioning.models import (
    CreatedAccount,
    CreateUserRequest,
    ImportPreview,
    ImportRecord,
    ImportReport,
    ProvisioningProgress,
    SubscriptionUpdateRequest,
)
from modules.provisioning.parser import parse_import_file
from modules.provisioning.service import AccountProvisioner, BulkProvisioningService
from shared.models import AuthenticatedUser

from ..dependencies import (
    get_account_provisioner,
    get_auth_service,
    get_bulk_provisioning_service,
    get_role_repository,
    get_subscription_repository,
)
from ..middleware.access import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminUserView(BaseModel):
    """A user as the admin dashboard lists it."""

    id: str
    email: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    role: RoleName = RoleName.USER
    subscription: Optional[SubscriptionRecord] = None


class PromoteRequest(BaseModel):
    email: EmailStr


class ImportErrorEvent(BaseModel):
    """Body of the `error` event of a streamed import."""

    error: str


@router.get("/users", response_model=list[AdminUserView])
async def list_users(
    admin: AuthenticatedUser = Depends(require_admin),
    auth: IAuthService = Depends(get_auth_service),
    roles: IRoleRepository = Depends(get_role_repository),
    subscriptions: ISubscriptionRepository = Depends(get_subscription_repository),
) -> list[AdminUserView]:
    """List every account with its role and latest subscription."""
    users = await auth.list_users()
    user_ids = [u.id for u in users]
    role_rows = roles.list_for_users(user_ids)
    subscription_rows = subscriptions.list_for_users(user_ids)

    return [
        AdminUserView(
            id=u.id,
            email=u.email,
            full_name=u.full_name,
            created_at=u.created_at,
            role=role_rows[u.id].role if u.id in role_rows else RoleName.USER,
            subscription=subscription_rows.get(u.id),
        )
        for u in users
    ]


@router.post("/users", response_model=CreatedAccount, status_code=201)
async def create_user(
    request: CreateUserRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    provisioner: AccountProvisioner = Depends(get_account_provisioner),
) -> CreatedAccount:
    """
    Create one account.

    The account is created with its email confirmed. A temporary password
    is generated when none is given, and the credentials are emailed.
    """
    record = ImportRecord(
        email=str(request.email),
        full_name=request.full_name,
        role=request.role,
        plan_type=request.plan_type,
    )
    return await provisioner.create_account(record, password=request.password)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    auth: IAuthService = Depends(get_auth_service),
) -> None:
    """Delete an account with its role and subscription rows."""
    await auth.delete_user(user_id)
    logger.info(f"Admin {admin.id} deleted user {user_id}")


@router.post("/roles", response_model=IdentityUser)
async def promote_user(
    request: PromoteRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    auth: IAuthService = Depends(get_auth_service),
) -> IdentityUser:
    """Make the account with this email an administrator."""
    return await auth.promote_to_admin(str(request.email))


@router.put("/users/{user_id}/subscription", response_model=SubscriptionRecord)
async def update_subscription(
    user_id: str,
    request: SubscriptionUpdateRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    provisioner: AccountProvisioner = Depends(get_account_provisioner),
) -> SubscriptionRecord:
    """Set a user's plan and status; active subscriptions get a fresh period."""
    return await provisioner.set_subscription(user_id, request.plan_type, request.status)


@router.delete("/subscriptions/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(
    subscription_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    subscriptions: ISubscriptionRepository = Depends(get_subscription_repository),
) -> None:
    """Hard-delete a subscription row."""
    subscriptions.delete(subscription_id)
    logger.info(f"Admin {admin.id} deleted subscription {subscription_id}")


@router.post("/users/import/preview", response_model=ImportPreview)
async def preview_import(
    file: UploadFile = File(...),
    admin: AuthenticatedUser = Depends(require_admin),
) -> ImportPreview:
    """Parse an uploaded CSV/XLSX file without creating anything."""
    records = parse_import_file(await file.read(), file.filename or "upload")
    return ImportPreview(records=records, total=len(records))


@router.post("/users/import", response_model=ImportReport)
async def import_users(
    file: UploadFile = File(...),
    admin: AuthenticatedUser = Depends(require_admin),
    bulk: BulkProvisioningService = Depends(get_bulk_provisioning_service),
) -> ImportReport:
    """
    Create an account for every row of an uploaded CSV/XLSX file.

    Rows are processed one at a time under the provisioning throttle. A
    failing row does not stop the import; the report lists every row's
    outcome. Re-uploading the same file attempts every row again.
    """
    filename = file.filename or "upload"
    records = parse_import_file(await file.read(), filename)
    logger.info(f"Admin {admin.id} importing {len(records)} users from {filename}")

    def log_progress(progress: ProvisioningProgress) -> None:
        logger.debug(f"Import {filename}: {progress.completed}/{progress.total}")

    return await bulk.run(records, on_progress=log_progress)


# Import runs outlive a dropped stream; hold references until they finish
_running_imports: set[asyncio.Task] = set()


async def import_event_generator(
    records: list[ImportRecord],
    bulk: BulkProvisioningService,
    filename: str,
) -> AsyncIterator[dict]:
    """
    Run a bulk import and yield SSE events as it goes.

    Yields:
        progress: ProvisioningProgress after each record
        report: the final ImportReport
        error: if the run itself stopped before finishing
    """
    queue: asyncio.Queue[Optional[ProvisioningProgress]] = asyncio.Queue()
    run = asyncio.create_task(bulk.run(records, on_progress=queue.put_nowait))
    _running_imports.add(run)
    run.add_done_callback(_running_imports.discard)
    run.add_done_callback(lambda _: queue.put_nowait(None))

    while True:
        progress = await queue.get()
        if progress is None:
            break
        yield {"event": "progress", "data": progress.model_dump_json()}

    try:
        report = run.result()
    except Exception as e:
        logger.error(f"Import {filename} stopped: {e}")
        error = ImportErrorEvent(error=str(e) or e.__class__.__name__)
        yield {"event": "error", "data": error.model_dump_json()}
        return
    yield {"event": "report", "data": report.model_dump_json()}


@router.post("/users/import/stream")
async def stream_import_users(
    file: UploadFile = File(...),
    admin: AuthenticatedUser = Depends(require_admin),
    bulk: BulkProvisioningService = Depends(get_bulk_provisioning_service),
):
    """
    Bulk import with live progress via SSE.

    The file is parsed before the stream opens, so an unreadable file is a
    plain 400. Each processed row emits a `progress` event; the stream ends
    with a `report` event carrying the same body as POST /users/import.
    Closing the stream does not stop the import.
    """
    filename = file.filename or "upload"
    records = parse_import_file(await file.read(), filename)
    logger.info(f"Admin {admin.id} streaming import of {len(records)} users from {filename}")
    return EventSourceResponse(
        import_event_generator(records, bulk, filename),
        media_type="text/event-stream",
    )
