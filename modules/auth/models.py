"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, EmailStr


class IdentityUser(BaseModel):
    """
    A principal as the identity provider reports it.

    Mirrors the fields of a Supabase Auth user the backend relies on.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: str = Field(default="", description="User's email address")
    created_at: Optional[datetime] = Field(None, description="Account creation time")
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @property
    def full_name(self) -> Optional[str]:
        return self.user_metadata.get("full_name")


class AuthSession(BaseModel):
    """Tokens issued by the identity provider after sign-in or sign-up."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(default="", description="Refresh token")
    expires_at: Optional[int] = Field(None, description="Expiry as a Unix timestamp")
    user: IdentityUser


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetResponse(BaseModel):
    """Same body whether or not the email has an account."""

    message: str = "If an account exists for this email, a reset link has been sent."


class SignUpRequest(BaseModel):
    """
    Self-service registration.

    The access code is the token the buyer received after payment; it ties
    the new account to the paid subscription.
    """

    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)
    access_code: str = Field(..., min_length=1, max_length=64)


class SignUpResponse(BaseModel):
    """Result of sign-up; session is None while email confirmation is pending."""

    user: IdentityUser
    session: Optional[AuthSession] = None
    subscription_linked: bool = False
