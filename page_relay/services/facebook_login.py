"""
Facebook login completion: authorization code to a stored long-lived token.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from page_relay.clients import FacebookGraphClient, UserStore
from page_relay.models.user import UserRecord

logger = logging.getLogger(__name__)


class FacebookLoginService:
    """Runs the code exchange, the long-lived exchange, the profile fetch and the upsert."""

    # Facebook's documented lifetime for long-lived user tokens.
    DEFAULT_TOKEN_LIFETIME = timedelta(days=60)

    def __init__(self, graph_client: FacebookGraphClient, user_store: UserStore) -> None:
        self._graph = graph_client
        self._store = user_store

    async def complete_login(self, code: str) -> UserRecord:
        """
        Finish the OAuth flow for ``code`` and return the stored record.

        Any ``GraphAPIError`` propagates before the store is touched, so a
        failed exchange never leaves a partial record behind.
        """
        short_lived_token = await self._graph.exchange_authorization_code(code)
        long_lived_token, expires_in = await self._graph.exchange_for_long_lived_token(
            short_lived_token
        )
        expires_at = self._compute_expiry(expires_in)

        profile = await self._graph.fetch_profile(long_lived_token)
        logger.info("Facebook login completed for %s", profile.id)

        return self._store.upsert_user(
            facebook_id=profile.id,
            name=profile.name,
            ll_user_token=long_lived_token,
            ll_user_token_expires_at=expires_at,
        )

    @classmethod
    def _compute_expiry(cls, expires_in: int | None) -> datetime:
        now = datetime.now(timezone.utc)
        if not expires_in or expires_in <= 0:
            return now + cls.DEFAULT_TOKEN_LIFETIME
        return now + timedelta(seconds=expires_in)


__all__ = ["FacebookLoginService"]
