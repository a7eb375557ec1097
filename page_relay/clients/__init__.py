"""Expose constructed client wrappers."""

from .automation_webhook import AutomationWebhookClient, WebhookDispatchError
from .facebook_graph import FacebookGraphClient, GraphAPIError
from .user_store import UserStore

__all__ = [
    "AutomationWebhookClient",
    "FacebookGraphClient",
    "GraphAPIError",
    "UserStore",
    "WebhookDispatchError",
]
