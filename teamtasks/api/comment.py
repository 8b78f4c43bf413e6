#teamtasks/api/comment.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from teamtasks.schemas.comment import CommentCreate, CommentRead, CommentUpdate
from teamtasks.services import comment_service
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as UserModel

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.post("/", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return comment_service.create_comment(db, current_user, data)


@router.get("/", response_model=List[CommentRead])
def list_all_comments(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return comment_service.list_all_comments(db, current_user, skip, limit)


@router.get("/my", response_model=List[CommentRead])
def list_my_comments(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return comment_service.list_my_comments(db, current_user, skip, limit)


@router.get("/user/{user_id}", response_model=List[CommentRead])
def list_comments_by_user(
    user_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return comment_service.list_comments_by_user(db, current_user, user_id, skip, limit)


@router.get("/{comment_id}", response_model=CommentRead)
def get_comment(comment_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return comment_service.get_comment(db, current_user, comment_id)


@router.patch("/{comment_id}", response_model=CommentRead)
def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Edit the content (author only).
    """
    return comment_service.update_comment(db, current_user, comment_id, data)


@router.delete("/{comment_id}", response_model=CommentRead)
def delete_comment(comment_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return comment_service.delete_comment(db, current_user, comment_id)
