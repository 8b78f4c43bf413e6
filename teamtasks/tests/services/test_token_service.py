import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from sqlalchemy import update
from sqlalchemy.orm import Session

from teamtasks.core import security
from teamtasks.core.exceptions import TokenExpiredError, TokenInvalidError, TokenRevokedError
from teamtasks.core.settings import settings
from teamtasks.models.auth import RefreshToken
from teamtasks.models.user import User
from teamtasks.services import token_service

T0 = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)


def test_create_refresh_token_sets_expiry(db: Session, test_user: User):
    with patch("teamtasks.core.clock.utcnow", return_value=T0):
        token = token_service.create_refresh_token(db, test_user)
    assert token.id is not None
    assert token.user_id == test_user.id
    assert token.revoked is False
    assert token.expires_at == T0 + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    assert len(token.token) >= 32


def test_refresh_token_strings_are_unique(db: Session, test_user: User):
    first = token_service.create_refresh_token(db, test_user)
    second = token_service.create_refresh_token(db, test_user)
    assert first.token != second.token


def test_verify_expiration_deletes_expired_token(db: Session, test_user: User):
    with patch("teamtasks.core.clock.utcnow", return_value=T0):
        token = token_service.create_refresh_token(db, test_user)
    token_string = token.token
    later = T0 + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS, seconds=1)
    with patch("teamtasks.core.clock.utcnow", return_value=later):
        with pytest.raises(TokenExpiredError):
            token_service.verify_expiration(db, token)
    assert token_service.find_by_token(db, token_string) is None


def test_verify_expiration_rejects_revoked_token(db: Session, test_user: User):
    token = token_service.create_refresh_token(db, test_user)
    assert token_service.revoke_by_string(db, token.token) is True
    with pytest.raises(TokenRevokedError):
        token_service.verify_expiration(db, token)
    assert token_service.find_by_token(db, token.token) is not None


def test_revoke_by_string_is_idempotent(db: Session, test_user: User):
    token = token_service.create_refresh_token(db, test_user)
    assert token_service.revoke_by_string(db, token.token) is True
    assert token_service.revoke_by_string(db, token.token) is False
    assert token_service.revoke_by_string(db, "no-such-token") is False


def test_rotate_token_revokes_the_old_one(db: Session, test_user: User):
    old = token_service.create_refresh_token(db, test_user)
    new = token_service.rotate_token(db, old)
    assert old.revoked is True
    assert old.revoked_at is not None
    assert new.token != old.token
    assert token_service.is_token_valid(db, new.token)
    assert not token_service.is_token_valid(db, old.token)


def test_rotate_token_only_once_per_token(db: Session, test_user: User):
    old = token_service.create_refresh_token(db, test_user)
    # Another request rotated the row after this copy was loaded
    db.execute(
        update(RefreshToken)
        .where(RefreshToken.id == old.id)
        .values(revoked=True)
        .execution_options(synchronize_session=False)
    )
    assert old.revoked is False
    with pytest.raises(TokenRevokedError):
        token_service.rotate_token(db, old)
    assert token_service.count_active_tokens(db, test_user) == 0


def test_revoke_all_and_count_active(db: Session, test_user: User, other_user: User):
    for _ in range(3):
        token_service.create_refresh_token(db, test_user)
    token_service.create_refresh_token(db, other_user)
    assert token_service.count_active_tokens(db, test_user) == 3
    assert token_service.revoke_all_user_tokens(db, test_user) == 3
    assert token_service.count_active_tokens(db, test_user) == 0
    assert token_service.get_active_tokens(db, other_user)[0].user_id == other_user.id


def test_sweeps_delete_expired_and_revoked(db: Session, test_user: User):
    with patch("teamtasks.core.clock.utcnow", return_value=T0):
        token_service.create_refresh_token(db, test_user)
    revoked = token_service.create_refresh_token(db, test_user)
    token_service.revoke_by_string(db, revoked.token)
    live = token_service.create_refresh_token(db, test_user)

    assert token_service.delete_expired_tokens(db) == 1
    assert token_service.delete_revoked_tokens(db) == 1
    assert token_service.is_token_valid(db, live.token)

# Access tokens

def test_access_token_round_trip(test_user: User):
    token, expires_at = token_service.issue_access_token(test_user)
    payload = security.decode_access_token(token)
    assert payload["sub"] == test_user.email
    assert payload["role"] == test_user.role.value
    assert payload["type"] == "access"
    assert expires_at > datetime.now(timezone.utc)


def test_access_token_expires(test_user: User):
    with patch("teamtasks.core.clock.utcnow", return_value=T0):
        token, _ = token_service.issue_access_token(test_user)
    later = T0 + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES, seconds=1)
    with patch("teamtasks.core.clock.utcnow", return_value=later):
        with pytest.raises(TokenExpiredError):
            security.decode_access_token(token)


def test_tampered_access_token_is_invalid(test_user: User):
    token, _ = token_service.issue_access_token(test_user)
    with pytest.raises(TokenInvalidError):
        security.decode_access_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])
