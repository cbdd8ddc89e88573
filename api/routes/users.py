"""
User-related endpoints.

Provides endpoints for user profile and account management.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from modules.access.models import RoleName
from modules.access.session import AccessContext
from shared.models import AuthenticatedUser

from ..middleware.access import get_access_context
from ..middleware.auth import get_current_user

router = APIRouter()


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: EmailStr
    email_verified: bool
    role: str
    is_admin: bool
    is_subscribed: bool
    has_access: bool
    full_name: Optional[str] = None


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    context: AccessContext = Depends(get_access_context),
) -> UserProfileResponse:
    """
    Get the current user's profile with their access state.

    Requires authentication.
    """
    access = context.access
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        email_verified=user.email_verified,
        role=RoleName.ADMIN.value if access.is_admin else RoleName.USER.value,
        is_admin=access.is_admin,
        is_subscribed=access.is_subscribed,
        has_access=access.has_access,
        full_name=user.full_name,
    )
