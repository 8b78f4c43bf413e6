# teamtasks/dependencies.py

from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from teamtasks.core.exceptions import NotAuthenticatedError
from teamtasks.core.security import decode_access_token, oauth2_scheme
from teamtasks.crud.user import get_user_by_email
from teamtasks.database import SessionLocal
from teamtasks.models.user import User
from teamtasks.services.storage import BlobStorage


def get_db() -> Generator[Session, None, None]:
    """
    Opens a database session for the request and always closes it.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_storage() -> BlobStorage:
    return BlobStorage()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Verifies the bearer access token and loads its user. The account status is
    checked by each service, so inactive users can still reach /auth/me.
    """
    payload = decode_access_token(token)
    user = get_user_by_email(db, payload["sub"])
    if user is None:
        raise NotAuthenticatedError()
    return user
