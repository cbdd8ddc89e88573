"""
Bearer token authentication.

Supabase issues HS256 JWTs with audience "authenticated"; the claims
become an AuthenticatedUser. Failures raise AuthenticationError
subclasses, rendered as 401 by the app's error handler.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as ModelValidationError

from modules.auth.exceptions import ExpiredTokenError, InvalidTokenError, MissingTokenError
from shared.config import get_settings
from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser

from ..models.user import TokenPayload

logger = logging.getLogger(__name__)

# Missing headers are reported by get_current_user, not by HTTPBearer
bearer_scheme = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = "authenticated"


def decode_token(token: str) -> TokenPayload:
    """
    Verify a Supabase access token and return its claims.

    Raises:
        ExpiredTokenError: If the token has expired
        InvalidTokenError: If the token is invalid or auth is not configured
    """
    secret = get_settings().supabase_jwt_secret
    if not secret:
        logger.error("SUPABASE_JWT_SECRET is not configured")
        raise InvalidTokenError("Server authentication not configured")

    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}")
    try:
        return TokenPayload(**claims)
    except ModelValidationError:
        raise InvalidTokenError("Token is missing required claims")


def get_user_from_payload(payload: TokenPayload) -> AuthenticatedUser:
    return AuthenticatedUser(
        id=payload.sub,
        email=payload.email,
        email_verified=payload.email_confirmed_at is not None,
        full_name=payload.user_metadata.get("full_name"),
        last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
    )


def authenticate(credentials: Optional[HTTPAuthorizationCredentials]) -> AuthenticatedUser:
    """Resolve the principal behind an Authorization header."""
    if credentials is None:
        raise MissingTokenError()
    payload = decode_token(credentials.credentials)
    try:
        return get_user_from_payload(payload)
    except ModelValidationError as e:
        # Phone and anonymous sessions carry an empty email claim
        logger.info(f"Token for {payload.sub} has no usable principal: {e.error_count()} errors")
        raise InvalidTokenError("Token does not identify an email account")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Dependency for endpoints that require a signed-in principal.

    Usage:
        @router.get("/me")
        async def me(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    return authenticate(credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthenticatedUser]:
    """Like get_current_user, but a missing, invalid or expired token means signed out."""
    try:
        return authenticate(credentials)
    except AuthenticationError:
        return None
