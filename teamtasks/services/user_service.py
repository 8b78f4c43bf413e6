# teamtasks/services/user_service.py
"""
User accounts: admin management, self-service profile updates and the
account lifecycle (activate, deactivate, suspend, soft delete, restore).
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, lifecycle
from teamtasks.core.authorization import Action, Resource
from teamtasks.core.exceptions import (
    EmailAlreadyRegistered,
    InvalidStatusTransitionError,
    NoFieldsToUpdateError,
    UserNotFound,
)
from teamtasks.core.security import hash_password
from teamtasks.crud import user as user_crud
from teamtasks.database import commit, flush
from teamtasks.models.enums import UserRole, UserStatus
from teamtasks.models.user import User
from teamtasks.schemas.user import UserCreate, UserUpdate
from teamtasks.services.common import page_bounds

logger = logging.getLogger("TaskHub.Users")

PRIVILEGED_FIELDS = {"role", "status", "email_verified"}


def build_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: UserRole = UserRole.MEMBER,
    actor: Optional[User] = None,
) -> User:
    """
    Adds a new ACTIVE user to the session and flushes it. Self-created
    accounts (registration, bootstrap) are audited as created by themselves.
    """
    email = user_crud.normalize_email(email)
    if user_crud.email_taken(db, email):
        raise EmailAlreadyRegistered()
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        role=role,
        status=UserStatus.ACTIVE,
        email_verified=False,
    )
    db.add(user)
    flush(db, EmailAlreadyRegistered())
    user.stamp_created(actor.id if actor is not None else user.id)
    return user


def create_user(db: Session, actor: Optional[User], data: UserCreate) -> User:
    """
    Admin-created account. `actor=None` is reserved for system bootstrap.
    """
    if actor is not None:
        authz.ensure_active(actor)
        authz.authorize(actor, Resource.USER, Action.ADMINISTER)
    user = build_user(db, data.email, data.password, data.first_name, data.last_name, data.role, actor)
    commit(db, EmailAlreadyRegistered())
    logger.info(f"Created user {user.id} ({user.email}) with role {user.role.value}")
    return user


def _load(db: Session, user_id: int) -> User:
    user = user_crud.get_user(db, user_id)
    if user is None:
        raise UserNotFound()
    return user


def get_user(db: Session, actor: User, user_id: int) -> User:
    """Self or ADMIN. Deleted accounts are only visible to administrators."""
    authz.ensure_active(actor)
    user = _load(db, user_id)
    if user.is_deleted and not authz.is_system_admin(actor):
        raise UserNotFound()
    authz.authorize(actor, Resource.USER, Action.READ, authz.AccessFacts(owner_id=user.id))
    return user


def list_users(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[User]:
    """Administrators see every account, everybody else the active ones."""
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    if authz.is_system_admin(actor):
        return user_crud.list_users(db, skip=skip, limit=limit)
    return user_crud.list_users(db, statuses=[UserStatus.ACTIVE], skip=skip, limit=limit)


def update_user(db: Session, actor: User, user_id: int, data: UserUpdate) -> User:
    authz.ensure_active(actor)
    user = _load(db, user_id)
    if user.is_deleted and not authz.is_system_admin(actor):
        raise UserNotFound()
    changes = data.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise NoFieldsToUpdateError()
    authz.authorize(actor, Resource.USER, Action.UPDATE, authz.AccessFacts(owner_id=user.id))
    authz.ensure_privileged_fields_allowed(actor, PRIVILEGED_FIELDS & changes.keys())
    if user.status != UserStatus.ACTIVE and "status" not in changes:
        raise InvalidStatusTransitionError(
            user.status, user.status, message="Only active accounts can be updated"
        )

    if "email" in changes:
        email = user_crud.normalize_email(changes["email"])
        if user_crud.email_taken(db, email, exclude_id=user.id):
            raise EmailAlreadyRegistered()
        user.email = email
    if "password" in changes:
        user.password_hash = hash_password(changes["password"])
    for field in ("first_name", "last_name", "avatar_url", "email_verified"):
        if field in changes:
            setattr(user, field, changes[field])
    if "role" in changes and changes["role"] != user.role:
        if changes["role"] != UserRole.ADMIN:
            authz.ensure_not_last_admin(user, user_crud.other_active_admin_exists(db, user.id))
        user.role = changes["role"]
    if "status" in changes and changes["status"] != user.status:
        _check_status_change(db, actor, user, changes["status"])
        user.status = changes["status"]

    user.stamp_updated(actor.id)
    commit(db, EmailAlreadyRegistered())
    logger.info(f"User {actor.id} updated user {user.id}: {sorted(changes.keys() - {'password'})}")
    return user


def _check_status_change(db: Session, actor: User, user: User, new_status: UserStatus) -> None:
    """Self-protection, last-admin protection, then the lifecycle table."""
    if new_status in (UserStatus.INACTIVE, UserStatus.SUSPENDED, UserStatus.DELETED):
        authz.ensure_not_self(actor, user.id, "You cannot deactivate, suspend or delete your own account")
        authz.ensure_not_last_admin(user, user_crud.other_active_admin_exists(db, user.id))
    lifecycle.validate_user_transition(user.status, new_status)


def _transition(db: Session, actor: User, user_id: int, new_status: UserStatus) -> User:
    authz.ensure_active(actor)
    user = _load(db, user_id)
    authz.authorize(actor, Resource.USER, Action.ADMINISTER)
    _check_status_change(db, actor, user, new_status)
    old_status = user.status
    user.status = new_status
    user.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} moved user {user.id} from {old_status.value} to {new_status.value}")
    return user


def activate_user(db: Session, actor: User, user_id: int) -> User:
    """INACTIVE or SUSPENDED -> ACTIVE. Deleted accounts go through restore."""
    authz.ensure_active(actor)
    user = _load(db, user_id)
    authz.authorize(actor, Resource.USER, Action.ADMINISTER)
    if user.status == UserStatus.DELETED:
        raise InvalidStatusTransitionError(
            user.status, UserStatus.ACTIVE, message="Deleted users must be restored, not activated"
        )
    return _transition(db, actor, user_id, UserStatus.ACTIVE)


def deactivate_user(db: Session, actor: User, user_id: int) -> User:
    return _transition(db, actor, user_id, UserStatus.INACTIVE)


def suspend_user(db: Session, actor: User, user_id: int) -> User:
    return _transition(db, actor, user_id, UserStatus.SUSPENDED)


def delete_user(db: Session, actor: User, user_id: int) -> User:
    """Soft delete."""
    return _transition(db, actor, user_id, UserStatus.DELETED)


def restore_user(db: Session, actor: User, user_id: int) -> User:
    """DELETED -> ACTIVE."""
    authz.ensure_active(actor)
    user = _load(db, user_id)
    authz.authorize(actor, Resource.USER, Action.ADMINISTER)
    if user.status != UserStatus.DELETED:
        raise InvalidStatusTransitionError(
            user.status, UserStatus.ACTIVE, message="Only deleted users can be restored"
        )
    return _transition(db, actor, user_id, UserStatus.ACTIVE)
