"""Public schema exports."""

from .facebook import FacebookProfile, ManagedPage, PageListResponse
from .posts import QueuePostRequest

__all__ = [
    "FacebookProfile",
    "ManagedPage",
    "PageListResponse",
    "QueuePostRequest",
]
