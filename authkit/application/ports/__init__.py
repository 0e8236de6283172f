# Ports package (collaborator contracts the services depend on)
from .cache import ShortLivedStore, CacheError, KeyNotFoundError
from .message_sender import MessageSender
from .user_repo import UserRepository, SignupInfo, OAuthUserInfo
from .oauth_provider import OAuthProvider
from .audit_logger import AuditLogger

__all__ = [
    "ShortLivedStore",
    "CacheError",
    "KeyNotFoundError",
    "MessageSender",
    "UserRepository",
    "SignupInfo",
    "OAuthUserInfo",
    "OAuthProvider",
    "AuditLogger",
]
