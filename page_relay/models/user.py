"""
Domain model for the persisted user identity record.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    """One Facebook identity and its long-lived user token."""

    id: str = Field(..., description="Internal identifier handed to the front-end.")
    facebook_id: str = Field(..., description="Facebook user id, unique per record.")
    name: Optional[str] = None
    ll_user_token: Optional[str] = Field(
        None, description="Decrypted long-lived user access token."
    )
    ll_user_token_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def has_usable_token(self, *, now: Optional[datetime] = None) -> bool:
        """True when a token is stored and has not passed its expiry."""
        if not self.ll_user_token:
            return False
        if self.ll_user_token_expires_at is None:
            return True
        expires_at = self.ll_user_token_expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at > (now or datetime.now(timezone.utc))


__all__ = ["UserRecord"]
