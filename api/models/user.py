"""
Token models for authentication.

The authenticated principal itself lives in shared.models.
"""

from typing import Any, Optional

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Supabase access token claims."""
    sub: str  # User ID
    email: str = ""
    email_confirmed_at: Optional[str] = None
    aud: str  # Audience
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    user_metadata: dict[str, Any] = {}
