"""
Login, logout and account bootstrap.
"""
import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from wagerdesk.core.auth import hash_password, hash_token, new_session_token, verify_password
from wagerdesk.core.config import settings
from wagerdesk.core.errors import Unauthorized
from wagerdesk.models import User
from wagerdesk.repositories import UserRepository, UserSessionRepository
from wagerdesk.utils.timezone import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    """Issues and revokes opaque session tokens."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.sessions = UserSessionRepository(db)

    def login(self, email: str, password: str) -> Tuple[str, User]:
        """
        Verify credentials and open a session.

        Returns:
            (raw session token, user). Only the token digest is persisted.

        Raises:
            Unauthorized: unknown email or wrong password
        """
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Rejected login attempt", extra={"email": email.strip().lower()})
            raise Unauthorized("Invalid email or password")

        token = new_session_token()
        self.sessions.create(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=utcnow() + timedelta(hours=settings.SESSION_TTL_HOURS),
        )
        self.sessions.save()
        logger.info(f"User {user.id} logged in")
        return token, user

    def logout(self, token: str) -> bool:
        session = self.sessions.find_active(hash_token(token))
        if session is None:
            return False
        self.sessions.revoke(session)
        self.sessions.save()
        return True

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.find_by_id(user_id)

    def upsert_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        bankroll: Optional[float] = None,
    ) -> User:
        """Create the account or reset its password (used by the seed script)."""
        user = self.users.find_by_email(email)
        if user is None:
            user = self.users.create(
                email=email.strip().lower(),
                name=name,
                password_hash=hash_password(password),
                current_bankroll=bankroll if bankroll is not None else settings.DEFAULT_BANKROLL,
            )
        else:
            user.password_hash = hash_password(password)
            if name:
                user.name = name
        self.users.save()
        self.users.refresh(user)
        return user
