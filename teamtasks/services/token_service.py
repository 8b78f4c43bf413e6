# teamtasks/services/token_service.py
"""
Access tokens (signed JWT, stateless) and refresh tokens (opaque, stored,
rotated on every use).
"""
from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from teamtasks.core import clock, security
from teamtasks.core.exceptions import TokenExpiredError, TokenRevokedError
from teamtasks.core.settings import settings
from teamtasks.crud import auth as token_crud
from teamtasks.database import commit
from teamtasks.models.auth import RefreshToken
from teamtasks.models.user import User

logger = logging.getLogger("TaskHub.Tokens")


def issue_access_token(user: User) -> tuple[str, datetime]:
    return security.create_access_token(subject=user.email, role=user.role.value)


def access_token_lifetime_seconds() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def add_refresh_token(db: Session, user: User) -> RefreshToken:
    now = clock.utcnow()
    token = RefreshToken(
        token=security.generate_refresh_token(),
        user_id=user.id,
        expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        revoked=False,
    )
    token.stamp_created(user.id, now)
    db.add(token)
    return token


def create_refresh_token(db: Session, user: User) -> RefreshToken:
    token = add_refresh_token(db, user)
    commit(db)
    logger.info(f"Issued refresh token for user {user.id}")
    return token


def find_by_token(db: Session, token: str) -> Optional[RefreshToken]:
    return token_crud.get_by_token(db, token)


def verify_expiration(db: Session, token: RefreshToken) -> RefreshToken:
    """
    Expired tokens are deleted on sight; revoked tokens are kept for the sweep.
    """
    if token.is_expired(clock.utcnow()):
        user_id = token.user_id
        db.delete(token)
        commit(db)
        logger.warning(f"Refresh token of user {user_id} expired and was removed")
        raise TokenExpiredError()
    if token.revoked:
        logger.warning(f"Revoked refresh token of user {token.user_id} was presented")
        raise TokenRevokedError()
    return token


def is_token_valid(db: Session, token_string: str) -> bool:
    token = find_by_token(db, token_string)
    if token is None:
        return False
    return not token.revoked and not token.is_expired(clock.utcnow())


def rotate_token(db: Session, old_token: RefreshToken) -> RefreshToken:
    """
    Revokes `old_token` and issues its replacement in the same transaction.
    The revocation only matches a row that is still unrevoked, so of two
    concurrent rotations of one token only the first succeeds.
    """
    now = clock.utcnow()
    result = db.execute(
        update(RefreshToken)
        .where(RefreshToken.id == old_token.id, RefreshToken.revoked.is_(False))
        .values(revoked=True, revoked_at=now, updated_at=now, updated_by=old_token.user_id)
    )
    if result.rowcount != 1:
        logger.warning(f"Refresh token of user {old_token.user_id} was already rotated")
        raise TokenRevokedError()
    new_token = add_refresh_token(db, old_token.user)
    commit(db)
    logger.info(f"Rotated refresh token for user {old_token.user_id}")
    return new_token


def revoke_by_string(db: Session, token_string: str) -> bool:
    """
    Returns True only when a live token was found and revoked now.
    Unknown or already revoked tokens return False.
    """
    token = find_by_token(db, token_string)
    if token is None or token.revoked:
        return False
    now = clock.utcnow()
    token.revoked = True
    token.revoked_at = now
    token.stamp_updated(token.user_id, now)
    commit(db)
    logger.info(f"Revoked refresh token of user {token.user_id}")
    return True


def revoke_all_user_tokens(db: Session, user: User) -> int:
    now = clock.utcnow()
    tokens = token_crud.list_unrevoked_tokens(db, user.id)
    for token in tokens:
        token.revoked = True
        token.revoked_at = now
        token.stamp_updated(user.id, now)
    commit(db)
    logger.info(f"Revoked {len(tokens)} refresh tokens of user {user.id}")
    return len(tokens)


def get_active_tokens(db: Session, user: User) -> List[RefreshToken]:
    return token_crud.list_live_tokens(db, user.id, clock.utcnow())


def count_active_tokens(db: Session, user: User) -> int:
    return token_crud.count_live_tokens(db, user.id, clock.utcnow())


def delete_expired_tokens(db: Session) -> int:
    deleted = token_crud.delete_expired(db, clock.utcnow())
    commit(db)
    logger.info(f"Deleted {deleted} expired refresh tokens")
    return deleted


def delete_revoked_tokens(db: Session) -> int:
    deleted = token_crud.delete_revoked(db)
    commit(db)
    logger.info(f"Deleted {deleted} revoked refresh tokens")
    return deleted
