"""
Service helpers for handing page posts to the automation workflow.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from page_relay.clients import AutomationWebhookClient
from page_relay.models.user import UserRecord

logger = logging.getLogger(__name__)


class PostQueueService:
    """Forward post requests to the automation webhook, which does the publishing."""

    def __init__(self, webhook_client: AutomationWebhookClient) -> None:
        self._webhook = webhook_client

    async def enqueue_post(
        self, *, user: UserRecord, page_id: str, message: str
    ) -> None:
        payload = self._build_message_payload(user=user, page_id=page_id, message=message)
        await self._webhook.trigger(payload)
        logger.info("Queued post for page %s on behalf of user %s", page_id, user.id)

    @staticmethod
    def _build_message_payload(
        *, user: UserRecord, page_id: str, message: str
    ) -> Dict[str, Any]:
        """Only what the workflow needs; it exchanges the user token for a page token itself."""
        return {
            "userId": user.id,
            "fbUserToken": user.ll_user_token,
            "pageId": page_id,
            "message": message,
        }


__all__ = ["PostQueueService"]
