"""Identity domain models."""

from .identity import Identity
from .principal import Principal
from .profile import Profile
from .session import LoginResult, RequestMetadata, Session
from .token import OAuthToken, TokenExchange
from .user import User, UserRole, UserStatus
from .value import IdentityId, SessionId, UserId, normalize_provider

__all__ = [
    "Identity",
    "IdentityId",
    "LoginResult",
    "OAuthToken",
    "Principal",
    "Profile",
    "RequestMetadata",
    "Session",
    "SessionId",
    "TokenExchange",
    "User",
    "UserId",
    "UserRole",
    "UserStatus",
    "normalize_provider",
]
