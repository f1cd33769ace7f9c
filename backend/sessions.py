"""Login sessions and role checks.

SessionService wraps a database session and is handed to routes through
FastAPI dependencies, so nothing about the logged-in user lives in module
state. Tokens travel as `Authorization: Bearer <token>`.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from config import config
from database import get_db
from logger import get_logger
from models import DashboardSettings, User, UserSession

logger = get_logger(__name__)

ROLES = ("staff", "manager", "admin")  # lowest to highest
PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, expected = stored.split("$")
        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), expected)


def has_role(user: User, required: str) -> bool:
    """True if the user's role is `required` or higher (admin > manager > staff)."""
    if user.role not in ROLES or required not in ROLES:
        return False
    return ROLES.index(user.role) >= ROLES.index(required)


class SessionService:
    def __init__(self, db: Session, ttl_hours: int = config.SESSION_TTL_HOURS):
        self.db = db
        self.ttl = timedelta(hours=ttl_hours)

    def login(self, username: str, password: str) -> Optional[Tuple[str, User]]:
        """Start a session. Returns (token, user), or None for bad credentials."""
        user = self.db.query(User).filter(User.username == username).first()
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {username!r}")
            return None

        now = datetime.utcnow()
        token = secrets.token_urlsafe(32)
        self.db.add(UserSession(token=token, user_id=user.id, created_at=now, expires_at=now + self.ttl))
        self.db.commit()
        return token, user

    def logout(self, token: str) -> bool:
        deleted = self.db.query(UserSession).filter(UserSession.token == token).delete()
        self.db.commit()
        return deleted > 0

    def current_user(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        session = self.db.query(UserSession).filter(UserSession.token == token).first()
        if session is None:
            return None
        if session.expires_at <= datetime.utcnow():
            self.db.delete(session)
            self.db.commit()
            return None
        return self.db.query(User).filter(User.id == session.user_id).first()

    def forget_user(self, user_id: int):
        """Drop a user's sessions and settings, ahead of deleting the user row."""
        self.db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        self.db.query(DashboardSettings).filter(DashboardSettings.user_id == user_id).delete()
        self.db.commit()


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    return SessionService(db)


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def require_user(
    token: Optional[str] = Depends(bearer_token),
    sessions: SessionService = Depends(get_session_service),
) -> User:
    user = sessions.current_user(token)
    if user is None:
        raise HTTPException(401, "Not authenticated")
    return user


def require_role(role: str):
    """Dependency factory: the current user must hold `role` or a higher one."""
    def dependency(user: User = Depends(require_user)) -> User:
        if not has_role(user, role):
            raise HTTPException(403, f"Requires {role} role")
        return user
    return dependency
