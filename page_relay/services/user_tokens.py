"""
Helpers for retrieving a user's stored Facebook token.
"""

from __future__ import annotations

import logging
from typing import Optional

from page_relay.clients import UserStore
from page_relay.models.user import UserRecord

logger = logging.getLogger(__name__)


class UserTokenNotFoundError(Exception):
    """Raised when no usable long-lived token is stored for a user."""


class UserTokenService:
    """Resolves internal user identifiers to records holding a usable token."""

    def __init__(self, user_store: UserStore) -> None:
        self._store = user_store

    def get_user_with_token(self, user_id: Optional[str]) -> UserRecord:
        """
        Return the record for ``user_id`` when its token can be used.

        Expired tokens count as missing; the front-end is expected to send the
        user through ``/auth/login`` again.
        """
        record = self._store.get_user(user_id)
        if record is None or not record.ll_user_token:
            raise UserTokenNotFoundError(f"No token stored for user {user_id}.")
        if not record.has_usable_token():
            logger.info(
                "Token for user %s expired at %s",
                record.id,
                record.ll_user_token_expires_at,
            )
            raise UserTokenNotFoundError(f"Token for user {user_id} has expired.")
        return record


__all__ = ["UserTokenNotFoundError", "UserTokenService"]
