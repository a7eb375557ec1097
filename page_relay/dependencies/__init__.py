"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_automation_webhook_client,
    get_facebook_graph_client,
    get_facebook_login_service,
    get_post_queue_service,
    get_token_cipher_service,
    get_user_store,
    get_user_token_service,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_automation_webhook_client",
    "get_facebook_graph_client",
    "get_facebook_login_service",
    "get_post_queue_service",
    "get_token_cipher_service",
    "get_user_store",
    "get_user_token_service",
]
