# teamtasks/services/auth_service.py
"""
Registration, login, token refresh and logout.
"""
from datetime import datetime
import logging
from typing import List, NamedTuple, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock
from teamtasks.core.authorization import Action, Resource
from teamtasks.core.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentialsError,
    TokenInvalidError,
    UserNotActiveError,
)
from teamtasks.core.security import verify_password
from teamtasks.crud import user as user_crud
from teamtasks.database import commit
from teamtasks.models.auth import RefreshToken
from teamtasks.models.enums import UserRole, UserStatus
from teamtasks.models.user import User
from teamtasks.schemas.auth import RegisterRequest
from teamtasks.services import token_service
from teamtasks.services.user_service import build_user

logger = logging.getLogger("TaskHub.Auth")


class AuthSession(NamedTuple):
    access_token: str
    access_expires_at: datetime
    refresh_token: str
    user: User


def register(db: Session, data: RegisterRequest) -> AuthSession:
    """
    Creates an ACTIVE MEMBER account and opens a session for it.
    """
    user = build_user(db, data.email, data.password, data.first_name, data.last_name, UserRole.MEMBER)
    refresh = token_service.add_refresh_token(db, user)
    commit(db, EmailAlreadyRegistered())
    access, expires_at = token_service.issue_access_token(user)
    logger.info(f"Registered user {user.id} ({user.email})")
    return AuthSession(access, expires_at, refresh.token, user)


def login(db: Session, email: str, password: str) -> AuthSession:
    user = user_crud.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()
    if user.status != UserStatus.ACTIVE:
        logger.warning(f"Login refused for user {user.id} with status {user.status.value}")
        raise UserNotActiveError()
    user.last_login_at = clock.utcnow()
    refresh = token_service.add_refresh_token(db, user)
    commit(db)
    access, expires_at = token_service.issue_access_token(user)
    logger.info(f"User {user.id} logged in")
    return AuthSession(access, expires_at, refresh.token, user)


def refresh(db: Session, token_string: str) -> AuthSession:
    """
    Exchanges a live refresh token for a new access token and a new refresh
    token. The presented token is revoked.
    """
    token = token_service.find_by_token(db, token_string)
    if token is None:
        logger.warning("Unknown refresh token presented")
        raise TokenInvalidError()
    token = token_service.verify_expiration(db, token)
    user = token.user
    if user.status != UserStatus.ACTIVE:
        logger.warning(f"Refresh refused for user {user.id} with status {user.status.value}")
        raise UserNotActiveError()
    new_token = token_service.rotate_token(db, token)
    access, expires_at = token_service.issue_access_token(user)
    return AuthSession(access, expires_at, new_token.token, user)


def logout(db: Session, token_string: Optional[str]) -> bool:
    """Idempotent: a blank, unknown or already revoked token is not an error."""
    if not token_string or not token_string.strip():
        logger.info("Logout without refresh token")
        return False
    revoked = token_service.revoke_by_string(db, token_string.strip())
    if not revoked:
        logger.info("Logout with a refresh token that was not live")
    return revoked


def logout_all(db: Session, actor: User) -> int:
    authz.ensure_authenticated(actor)
    return token_service.revoke_all_user_tokens(db, actor)


def list_sessions(db: Session, actor: User) -> List[RefreshToken]:
    authz.ensure_authenticated(actor)
    return token_service.get_active_tokens(db, actor)


def cleanup_tokens(db: Session, actor: User) -> tuple[int, int]:
    """Runs both sweeps. Returns (expired_deleted, revoked_deleted)."""
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.SYSTEM, Action.ADMINISTER)
    expired = token_service.delete_expired_tokens(db)
    revoked = token_service.delete_revoked_tokens(db)
    return expired, revoked
