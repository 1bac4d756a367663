from .auth_service import AuthService, LoginResult
from .session_sweeper import SessionSweeper

__all__ = ["AuthService", "LoginResult", "SessionSweeper"]
