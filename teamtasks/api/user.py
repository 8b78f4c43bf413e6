#teamtasks/api/user.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from teamtasks.schemas.user import UserCreate, UserUpdate, UserRead
from teamtasks.services import user_service
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as DBUser

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserRead)
def read_users_me(current_user: DBUser = Depends(get_current_user)):
    """
    Get current logged-in user profile.
    """
    return current_user


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Create a user account (admin only).
    """
    return user_service.create_user(db, current_user, data)


@router.get("/", response_model=List[UserRead])
def list_users(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Admins get every account; other users get the active ones.
    """
    return user_service.list_users(db, current_user, skip, limit)


@router.get("/{user_id}", response_model=UserRead)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Get user profile by ID (allowed self or admin).
    """
    return user_service.get_user(db, current_user, user_id)


@router.patch("/{user_id}", response_model=UserRead)
def patch_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Update a profile. Role, status and email_verified are admin only.
    """
    return user_service.update_user(db, current_user, user_id, data)


@router.post("/{user_id}/activate", response_model=UserRead)
def activate_user(user_id: int, db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    return user_service.activate_user(db, current_user, user_id)


@router.post("/{user_id}/deactivate", response_model=UserRead)
def deactivate_user(user_id: int, db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    return user_service.deactivate_user(db, current_user, user_id)


@router.post("/{user_id}/suspend", response_model=UserRead)
def suspend_user(user_id: int, db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    return user_service.suspend_user(db, current_user, user_id)


@router.post("/{user_id}/restore", response_model=UserRead)
def restore_user(user_id: int, db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    return user_service.restore_user(db, current_user, user_id)


@router.delete("/{user_id}", response_model=UserRead)
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    """
    Soft delete: the account is kept with status DELETED.
    """
    return user_service.delete_user(db, current_user, user_id)
