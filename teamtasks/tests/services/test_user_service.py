import pytest
from sqlalchemy.orm import Session

from teamtasks.core.exceptions import (
    AccessDeniedError,
    EmailAlreadyRegistered,
    InvalidStatusTransitionError,
    LastAdminProtectedError,
    NoFieldsToUpdateError,
    SelfOperationNotAllowedError,
    UserNotActiveError,
    UserNotFound,
)
from teamtasks.core.security import verify_password
from teamtasks.models.enums import UserRole, UserStatus
from teamtasks.schemas.user import UserCreate, UserUpdate
from teamtasks.services import user_service


def test_admin_creates_user(db: Session, test_admin):
    data = UserCreate(email="Staff@Example.com", password="Secure123!Pass", first_name="Sam", last_name="Staff", role=UserRole.MANAGER)
    user = user_service.create_user(db, test_admin, data)
    assert user.email == "staff@example.com"
    assert user.role == UserRole.MANAGER
    assert user.created_by == test_admin.id


def test_member_cannot_create_user(db: Session, test_user):
    data = UserCreate(email="x@example.com", password="Secure123!Pass", first_name="X", last_name="Y")
    with pytest.raises(AccessDeniedError):
        user_service.create_user(db, test_user, data)


def test_bootstrap_create_without_actor(db: Session):
    data = UserCreate(email="root@example.com", password="Secure123!Pass", first_name="Root", last_name="Admin", role=UserRole.ADMIN)
    user = user_service.create_user(db, None, data)
    assert user.role == UserRole.ADMIN
    assert user.created_by == user.id


def test_get_user_self_or_admin(db: Session, test_user, other_user, test_admin):
    assert user_service.get_user(db, test_user, test_user.id).id == test_user.id
    assert user_service.get_user(db, test_admin, test_user.id).id == test_user.id
    with pytest.raises(AccessDeniedError):
        user_service.get_user(db, test_user, other_user.id)


def test_deleted_user_hidden_from_non_admins(db: Session, test_user, other_user, test_admin):
    user_service.delete_user(db, test_admin, other_user.id)
    with pytest.raises(UserNotFound):
        user_service.get_user(db, test_user, other_user.id)
    assert user_service.get_user(db, test_admin, other_user.id).status == UserStatus.DELETED


def test_list_users_visibility(db: Session, test_user, other_user, test_admin):
    user_service.suspend_user(db, test_admin, other_user.id)
    visible = {u.id for u in user_service.list_users(db, test_user)}
    assert other_user.id not in visible
    assert test_user.id in visible
    assert other_user.id in {u.id for u in user_service.list_users(db, test_admin)}


def test_inactive_actor_is_rejected(db: Session, make_user):
    inactive = make_user("sleepy@example.com", status=UserStatus.INACTIVE)
    with pytest.raises(UserNotActiveError):
        user_service.get_user(db, inactive, inactive.id)


def test_update_own_profile(db: Session, test_user):
    updated = user_service.update_user(
        db, test_user, test_user.id,
        UserUpdate(first_name="Olivia", password="Another123!Pass"),
    )
    assert updated.first_name == "Olivia"
    assert verify_password("Another123!Pass", updated.password_hash)


def test_update_requires_a_field(db: Session, test_user):
    with pytest.raises(NoFieldsToUpdateError):
        user_service.update_user(db, test_user, test_user.id, UserUpdate())


def test_update_email_must_be_unique(db: Session, test_user, other_user):
    with pytest.raises(EmailAlreadyRegistered):
        user_service.update_user(db, test_user, test_user.id, UserUpdate(email="MEMBER@example.com"))


def test_member_cannot_change_own_role(db: Session, test_user):
    with pytest.raises(AccessDeniedError, match="role"):
        user_service.update_user(db, test_user, test_user.id, UserUpdate(role=UserRole.ADMIN))


def test_last_admin_cannot_be_demoted(db: Session, test_admin):
    with pytest.raises(LastAdminProtectedError):
        user_service.update_user(db, test_admin, test_admin.id, UserUpdate(role=UserRole.MEMBER))


def test_admin_can_be_demoted_when_another_exists(db: Session, test_admin, make_user):
    second = make_user("second.admin@example.com", role=UserRole.ADMIN)
    demoted = user_service.update_user(db, test_admin, second.id, UserUpdate(role=UserRole.MEMBER))
    assert demoted.role == UserRole.MEMBER


def test_admin_cannot_suspend_self(db: Session, test_admin, make_user):
    make_user("second.admin@example.com", role=UserRole.ADMIN)
    with pytest.raises(SelfOperationNotAllowedError):
        user_service.suspend_user(db, test_admin, test_admin.id)


def test_suspended_admins_do_not_count(db: Session, test_admin, make_user):
    other_admin = make_user("other.admin@example.com", role=UserRole.ADMIN)
    user_service.suspend_user(db, test_admin, other_admin.id)
    with pytest.raises(LastAdminProtectedError):
        user_service.update_user(db, test_admin, test_admin.id, UserUpdate(role=UserRole.MANAGER))


def test_deleting_an_admin_is_allowed_while_another_is_active(db: Session, test_admin, make_user):
    other_admin = make_user("other.admin@example.com", role=UserRole.ADMIN)
    assert user_service.delete_user(db, test_admin, other_admin.id).status == UserStatus.DELETED


def test_lifecycle_operations(db: Session, test_admin, other_user):
    assert user_service.deactivate_user(db, test_admin, other_user.id).status == UserStatus.INACTIVE
    assert user_service.activate_user(db, test_admin, other_user.id).status == UserStatus.ACTIVE
    assert user_service.delete_user(db, test_admin, other_user.id).status == UserStatus.DELETED
    with pytest.raises(InvalidStatusTransitionError, match="restored"):
        user_service.activate_user(db, test_admin, other_user.id)
    assert user_service.restore_user(db, test_admin, other_user.id).status == UserStatus.ACTIVE


def test_restore_only_from_deleted(db: Session, test_admin, other_user):
    with pytest.raises(InvalidStatusTransitionError):
        user_service.restore_user(db, test_admin, other_user.id)


def test_suspend_requires_admin(db: Session, test_user, other_user):
    with pytest.raises(AccessDeniedError):
        user_service.suspend_user(db, test_user, other_user.id)
