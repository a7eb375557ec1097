"""Client for the external automation workflow (n8n) that publishes posts."""

from __future__ import annotations

from typing import Any, Dict

import httpx

from page_relay.utils.http import (
    build_async_client,
    describe_transport_error,
    extract_error_detail,
)

INTERNAL_KEY_HEADER = "x-internal-key"


class WebhookDispatchError(Exception):
    """Raised when the automation webhook cannot be reached or rejects a job."""

    def __init__(self, detail: Any, *, status_code: int | None = None) -> None:
        super().__init__(str(detail))
        self.detail = detail
        self.status_code = status_code


class AutomationWebhookClient:
    """POST jobs to the automation webhook, authenticated by the shared secret."""

    def __init__(
        self,
        *,
        webhook_url: str,
        internal_api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._internal_api_key = internal_api_key
        self._timeout = timeout
        self._transport = transport

    async def trigger(self, payload: Dict[str, Any]) -> None:
        """Deliver a payload once. There is no retry and no delivery guarantee."""
        try:
            async with build_async_client(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._webhook_url,
                    json=payload,
                    headers={INTERNAL_KEY_HEADER: self._internal_api_key},
                )
        except httpx.HTTPError as exc:
            raise WebhookDispatchError(describe_transport_error(exc)) from exc

        if not response.is_success:
            raise WebhookDispatchError(
                extract_error_detail(response), status_code=response.status_code
            )


__all__ = ["AutomationWebhookClient", "INTERNAL_KEY_HEADER", "WebhookDispatchError"]
