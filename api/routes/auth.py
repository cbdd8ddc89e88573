"""
Session endpoints.

Sign-in, access-code sign-up, sign-out and password recovery against
Supabase Auth. The browser keeps the returned tokens; every other
endpoint reads them from the Authorization header.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from modules.auth.interfaces import IAuthService
from modules.auth.models import (
    AuthSession,
    PasswordResetRequest,
    PasswordResetResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
)
from shared.models import AuthenticatedUser

from ..dependencies import get_auth_service
from ..middleware.auth import bearer_scheme, get_current_user

router = APIRouter()


@router.post("/sign-in", response_model=AuthSession)
async def sign_in(
    request: SignInRequest,
    service: IAuthService = Depends(get_auth_service),
) -> AuthSession:
    """Exchange email and password for a session."""
    return await service.sign_in(str(request.email), request.password)


@router.post("/sign-up", response_model=SignUpResponse, status_code=201)
async def sign_up(
    request: SignUpRequest,
    service: IAuthService = Depends(get_auth_service),
) -> SignUpResponse:
    """
    Register with the access code received after payment.

    Rejected with 400 when the code is unknown, inactive, expired or issued
    to a different email.
    """
    return await service.sign_up(request)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    user: AuthenticatedUser = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    service: IAuthService = Depends(get_auth_service),
) -> None:
    """Revoke the caller's session."""
    await service.sign_out(credentials.credentials)


@router.post("/password-reset", response_model=PasswordResetResponse, status_code=202)
async def request_password_reset(
    request: PasswordResetRequest,
    service: IAuthService = Depends(get_auth_service),
) -> PasswordResetResponse:
    """Email a recovery link that leads back to the sign-in page."""
    await service.send_password_reset(str(request.email))
    return PasswordResetResponse()
