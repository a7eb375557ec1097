"""Service layer exports."""

from .facebook_login import FacebookLoginService
from .post_queue import PostQueueService
from .token_cipher import TokenCipherService
from .user_tokens import UserTokenNotFoundError, UserTokenService

__all__ = [
    "FacebookLoginService",
    "PostQueueService",
    "TokenCipherService",
    "UserTokenNotFoundError",
    "UserTokenService",
]
