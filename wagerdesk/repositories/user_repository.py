"""
User and session repositories.

Usage:
    repo = UserRepository(db)
    user = repo.find_by_email("john@doe.com")
"""
from typing import Optional

from wagerdesk.models import User, UserSession
from wagerdesk.repositories.base import BaseRepository
from wagerdesk.utils.timezone import utcnow


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db):
        super().__init__(User, db)

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; emails are stored lower-cased."""
        return self.where_first(User.email == email.strip().lower())


class UserSessionRepository(BaseRepository[UserSession]):
    """Repository for login sessions."""

    def __init__(self, db):
        super().__init__(UserSession, db)

    def find_active(self, token_hash: str) -> Optional[UserSession]:
        """Session for this token digest that is neither revoked nor expired."""
        return self.where_first(
            UserSession.token_hash == token_hash,
            UserSession.revoked_at.is_(None),
            UserSession.expires_at > utcnow(),
        )

    def revoke(self, session: UserSession) -> None:
        session.revoked_at = utcnow()
