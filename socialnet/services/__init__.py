"""Services package exports."""

from socialnet.services.logging_service import configure_logging, get_logger
from socialnet.services.password_hasher import PasswordHasher
from socialnet.services.session_manager import SessionManager
from socialnet.services.token_codec import TokenCodec
from socialnet.services.user_service import UserService

__all__ = [
    "PasswordHasher",
    "SessionManager",
    "TokenCodec",
    "UserService",
    "configure_logging",
    "get_logger",
]
