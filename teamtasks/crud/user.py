#teamtasks/crud/user.py
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamtasks.models.enums import UserRole, UserStatus
from teamtasks.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(User.id).filter(func.lower(User.email) == normalize_email(email))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.query(query.exists()).scalar()


def other_active_admin_exists(db: Session, user_id: int) -> bool:
    query = db.query(User.id).filter(
        User.role == UserRole.ADMIN,
        User.status == UserStatus.ACTIVE,
        User.id != user_id,
    )
    return db.query(query.exists()).scalar()


def list_users(
    db: Session,
    statuses: Optional[Iterable[UserStatus]] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[User]:
    query = db.query(User)
    if statuses is not None:
        query = query.filter(User.status.in_(list(statuses)))
    return query.order_by(User.id).offset(skip).limit(limit).all()
