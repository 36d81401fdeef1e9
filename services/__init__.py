from services.session_manager import SessionManager, TokenPair, AuthResult
from services.user_service import UserService

__all__ = ["SessionManager", "TokenPair", "AuthResult", "UserService"]
