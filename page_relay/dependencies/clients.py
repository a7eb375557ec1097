"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Clients and the store are process-wide singletons. Services are rebuilt per
request from injected collaborators, so tests can override a single leaf
(graph client, webhook client, store) and every service picks it up.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from page_relay.clients import AutomationWebhookClient, FacebookGraphClient, UserStore
from page_relay.core.config import get_settings
from page_relay.services import (
    FacebookLoginService,
    PostQueueService,
    TokenCipherService,
    UserTokenService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.facebook.app_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_user_store() -> UserStore:
    """Provide the shared user identity store."""
    settings = _settings()
    return UserStore(settings.database_path, cipher=get_token_cipher_service())


@lru_cache()
def get_facebook_graph_client() -> FacebookGraphClient:
    """Create a singleton Facebook Graph API client."""
    settings = _settings()
    return FacebookGraphClient(
        settings.facebook, timeout=settings.http_timeout_seconds
    )


@lru_cache()
def get_automation_webhook_client() -> AutomationWebhookClient:
    """Create a singleton client for the automation webhook."""
    settings = _settings()
    return AutomationWebhookClient(
        webhook_url=settings.automation.webhook_url,
        internal_api_key=settings.automation.internal_api_key,
        timeout=settings.http_timeout_seconds,
    )


def get_facebook_login_service(
    graph_client: Annotated[FacebookGraphClient, Depends(get_facebook_graph_client)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
) -> FacebookLoginService:
    """Build the login completion service."""
    return FacebookLoginService(graph_client, user_store)


def get_user_token_service(
    user_store: Annotated[UserStore, Depends(get_user_store)],
) -> UserTokenService:
    """Build the stored token lookup service."""
    return UserTokenService(user_store)


def get_post_queue_service(
    webhook_client: Annotated[
        AutomationWebhookClient, Depends(get_automation_webhook_client)
    ],
) -> PostQueueService:
    """Build the post forwarding service."""
    return PostQueueService(webhook_client)


__all__ = [
    "get_automation_webhook_client",
    "get_facebook_graph_client",
    "get_facebook_login_service",
    "get_post_queue_service",
    "get_token_cipher_service",
    "get_user_store",
    "get_user_token_service",
]
