"""
Session login/logout routes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from wagerdesk.api.schemas import CamelModel, MessageResponse
from wagerdesk.core.auth import Principal, extract_token, get_principal
from wagerdesk.core.config import settings
from wagerdesk.core.database import get_db
from wagerdesk.core.errors import NotFound, ValidationFailed
from wagerdesk.core.rate_limit import limiter
from wagerdesk.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserProfile(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    current_bankroll: float


class LoginResponse(CamelModel):
    token: str
    user: UserProfile


def _profile(user) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        name=user.name,
        current_bankroll=user.current_bankroll or settings.DEFAULT_BANKROLL,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
async def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a session token."""
    if not body.email or not body.password:
        raise ValidationFailed()
    token, user = AuthService(db).login(body.email, body.password)
    return LoginResponse(token=token, user=_profile(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(extract_token),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Revoke the session used for this request."""
    AuthService(db).logout(token)
    logger.info(f"User {principal.user_id} logged out")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserProfile)
async def me(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    user = AuthService(db).get_user(principal.user_id)
    if user is None:
        raise NotFound("User not found")
    return _profile(user)
