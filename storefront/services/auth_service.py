import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import AuthError, ValidationError
from ..store.base import Store, public_user

log = logging.getLogger(__name__)


@dataclass
class LoginResult:
    session: dict
    user: dict


class AuthService:
    """Credential checks and session issuance on top of a store."""

    def __init__(self, store: Store):
        self.store = store

    @property
    def ttl_seconds(self) -> int:
        return int(self.store.session_ttl.total_seconds())

    def login(self, username: Optional[str], password: Optional[str]) -> LoginResult:
        username = username.strip() if isinstance(username, str) else ""
        if not username or not password or not isinstance(password, str):
            raise ValidationError("Username and password are required")

        user = self.store.verify_password(username, password)
        if not user:
            log.warning("login rejected for %r", username)
            raise AuthError("Invalid username or password")

        session = self.store.create_session(user["id"])
        self.store.update_admin_user_last_login(user["id"])
        log.info("admin %s logged in", username)
        return LoginResult(session=session, user=public_user(user))

    def logout(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self.store.delete_session(token)

    def authenticate(self, token: Optional[str]) -> Tuple[dict, dict]:
        """(session, user) for a live token; AuthError otherwise."""
        if not token:
            raise AuthError("Authentication required")
        session = self.store.get_session(token)
        if not session:
            raise AuthError("Invalid or expired session")
        user = self.store.get_admin_user_by_id(session["userId"])
        if not user or not user.get("isActive"):
            self.store.delete_session(token)
            raise AuthError("User not found or inactive")
        return session, user

    def verify(self, token: Optional[str]) -> dict:
        """Soft check for UI state; never raises."""
        try:
            session, user = self.authenticate(token)
        except AuthError:
            return {"authenticated": False}
        except Exception:
            log.exception("session verification failed")
            return {"authenticated": False}
        return {
            "authenticated": True,
            "user": public_user(user),
            "expiresAt": session["expiresAt"],
        }
