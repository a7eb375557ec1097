"""
Facebook Login and Graph API client.

Covers the authorization redirect, the two token exchanges, the profile lookup
and the managed pages listing. The client holds no per-user state.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from page_relay.core.config import FacebookSettings
from page_relay.schemas.facebook import FacebookProfile, ManagedPage
from page_relay.utils.http import (
    build_async_client,
    describe_transport_error,
    extract_error_detail,
)


class GraphAPIError(Exception):
    """Raised when a Facebook endpoint fails, times out, or answers unexpectedly."""

    def __init__(self, detail: Any, *, status_code: Optional[int] = None) -> None:
        super().__init__(str(detail))
        self.detail = detail
        self.status_code = status_code


class FacebookGraphClient:
    """Build the Facebook login URL and call the Graph API on behalf of a user."""

    DIALOG_BASE_URL = "https://www.facebook.com"
    GRAPH_BASE_URL = "https://graph.facebook.com"

    def __init__(
        self,
        facebook_settings: FacebookSettings,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._facebook = facebook_settings
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(self) -> str:
        """Construct the Facebook OAuth consent URL."""
        params = {
            "client_id": self._facebook.app_id,
            "redirect_uri": self._facebook.redirect_uri,
            "scope": ",".join(self._facebook.scopes),
            "response_type": "code",
        }
        version = self._facebook.graph_api_version
        return f"{self.DIALOG_BASE_URL}/{version}/dialog/oauth?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> str:
        """Exchange an authorization code for a short-lived user token."""
        payload = await self._get(
            "oauth/access_token",
            {
                "client_id": self._facebook.app_id,
                "client_secret": self._facebook.app_secret,
                "redirect_uri": self._facebook.redirect_uri,
                "code": code,
            },
        )
        return self._require_access_token(payload)

    async def exchange_for_long_lived_token(
        self, short_lived_token: str
    ) -> Tuple[str, Optional[int]]:
        """
        Trade a short-lived user token for a long-lived one.

        Returns a tuple of (access_token, expires_in_seconds). Facebook omits
        ``expires_in`` for some tokens, in which case the second item is None.
        """
        payload = await self._get(
            "oauth/access_token",
            {
                "grant_type": "fb_exchange_token",
                "client_id": self._facebook.app_id,
                "client_secret": self._facebook.app_secret,
                "fb_exchange_token": short_lived_token,
            },
        )
        access_token = self._require_access_token(payload)

        expires_in = payload.get("expires_in")
        if expires_in is None:
            return access_token, None
        try:
            return access_token, int(expires_in)
        except (TypeError, ValueError) as exc:
            raise GraphAPIError(f"Unusable expires_in value: {expires_in!r}") from exc

    async def fetch_profile(self, access_token: str) -> FacebookProfile:
        """Return the id and display name of the token owner."""
        payload = await self._get(
            "me", {"fields": "id,name", "access_token": access_token}
        )
        if not payload.get("id"):
            raise GraphAPIError("Profile response did not include an id.")
        try:
            return FacebookProfile.model_validate(payload)
        except ValidationError as exc:
            raise GraphAPIError(f"Malformed profile: {exc}") from exc

    async def list_managed_pages(self, access_token: str) -> List[ManagedPage]:
        """List the pages the user manages, keeping only their id and name."""
        payload = await self._get("me/accounts", {"access_token": access_token})
        pages = payload.get("data", [])
        if not isinstance(pages, list):
            raise GraphAPIError("Accounts response 'data' is not a list.")
        try:
            return [ManagedPage.model_validate(page) for page in pages]
        except ValidationError as exc:
            raise GraphAPIError(f"Malformed page entry: {exc}") from exc

    @staticmethod
    def _require_access_token(payload: Dict[str, Any]) -> str:
        access_token = payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise GraphAPIError("Token endpoint returned no usable access_token.")
        return access_token

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.GRAPH_BASE_URL}/{self._facebook.graph_api_version}/{path}"
        try:
            async with build_async_client(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise GraphAPIError(describe_transport_error(exc)) from exc

        if response.status_code != HTTPStatus.OK:
            raise GraphAPIError(
                extract_error_detail(response), status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise GraphAPIError(
                "Graph API returned a non-JSON body.",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise GraphAPIError(
                f"Graph API returned a {type(payload).__name__}, expected an object.",
                status_code=response.status_code,
            )
        return payload


__all__ = ["FacebookGraphClient", "GraphAPIError"]
