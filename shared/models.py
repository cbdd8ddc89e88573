"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated principal in the system.

    This model is populated from JWT claims and made available
    to route handlers via dependency injection. The email is the
    join key to subscriptions and admin-created records.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: EmailStr = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    full_name: Optional[str] = Field(None, description="Display name from user metadata")

    created_at: Optional[datetime] = Field(None, description="Account creation time")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    # JWT role claim; the effective application role lives in user_roles
    role: str = Field(default="user", description="Token role claim")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }
