"""
Session authentication and the request principal.

Users log in with email and password and receive an opaque session token.
Every protected endpoint depends on `get_principal`, which resolves the
token once per request into a `Principal` that is passed explicitly into
services.

Usage:
    @router.get("/picks")
    async def list_picks(principal: Principal = Depends(get_principal)):
        ...
"""
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from wagerdesk.core.database import get_db
from wagerdesk.core.errors import NotFound, Unauthorized
from wagerdesk.core.logging import bind_user_id, get_logger
from wagerdesk.repositories.user_repository import UserRepository, UserSessionRepository

logger = get_logger(__name__)

SESSION_HEADER_NAME = "X-Session-Token"
PBKDF2_ITERATIONS = 260_000

bearer_scheme = HTTPBearer(auto_error=False)
session_header = APIKeyHeader(name=SESSION_HEADER_NAME, auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""
    user_id: str
    email: str


# ============================================================================
# Passwords and tokens
# ============================================================================

def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """
    Hash a password with PBKDF2-SHA256.

    Returns:
        "salt$iterations$hexdigest"
    """
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{salt}${iterations}${digest.hex()}"


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    if not stored_hash:
        return False
    try:
        salt, iterations, expected = stored_hash.split("$")
        rounds = int(iterations)
    except ValueError:
        logger.warning("Malformed password hash encountered")
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """SHA-256 digest stored in place of the raw session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# ============================================================================
# Dependencies
# ============================================================================

def extract_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    header_token: Optional[str] = Security(session_header),
) -> Optional[str]:
    """Session token from `Authorization: Bearer` or `X-Session-Token`."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return header_token or None


async def get_principal(
    token: Optional[str] = Depends(extract_token),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Resolve the session token into a Principal.

    Raises:
        Unauthorized: token missing, unknown, revoked or expired
        NotFound: session is valid but the user row no longer exists
    """
    if not token:
        raise Unauthorized()

    session = UserSessionRepository(db).find_active(hash_token(token))
    if session is None:
        raise Unauthorized()

    user = UserRepository(db).find_by_id(session.user_id)
    if user is None:
        logger.warning("Session references a missing user", extra={"session_id": session.id})
        raise NotFound("User not found")

    bind_user_id(user.id)
    return Principal(user_id=user.id, email=user.email)
