#teamtasks/crud/auth.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.models.auth import RefreshToken


def get_by_token(db: Session, token: str) -> Optional[RefreshToken]:
    return db.query(RefreshToken).filter(RefreshToken.token == token).first()


def _live_tokens_query(db: Session, user_id: int, now: datetime):
    return db.query(RefreshToken).filter(
        RefreshToken.user_id == user_id,
        RefreshToken.revoked == False,  # noqa: E712
        RefreshToken.expires_at > now,
    )


def list_live_tokens(db: Session, user_id: int, now: datetime) -> List[RefreshToken]:
    return _live_tokens_query(db, user_id, now).order_by(RefreshToken.created_at.desc()).all()


def count_live_tokens(db: Session, user_id: int, now: datetime) -> int:
    return _live_tokens_query(db, user_id, now).count()


def list_unrevoked_tokens(db: Session, user_id: int) -> List[RefreshToken]:
    return db.query(RefreshToken).filter(
        RefreshToken.user_id == user_id,
        RefreshToken.revoked == False,  # noqa: E712
    ).all()


def delete_expired(db: Session, now: datetime) -> int:
    return db.query(RefreshToken).filter(RefreshToken.expires_at <= now).delete(synchronize_session=False)


def delete_revoked(db: Session) -> int:
    return db.query(RefreshToken).filter(RefreshToken.revoked == True).delete(synchronize_session=False)  # noqa: E712
