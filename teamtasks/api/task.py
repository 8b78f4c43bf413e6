#teamtasks/api/task.py
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from teamtasks.schemas.task import TaskAssign, TaskCreate, TaskRead, TaskUpdate
from teamtasks.schemas.comment import CommentRead
from teamtasks.schemas.attachment import AttachmentRead
from teamtasks.services import attachment_service, comment_service, task_service
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as UserModel

logger = logging.getLogger("TaskHub.TasksAPI")

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_new_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Create a task in an ACTIVE project.
    """
    return task_service.create_task(db, current_user, data)


@router.get("/", response_model=List[TaskRead])
def list_all_tasks(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return task_service.list_all_tasks(db, current_user, skip, limit)


@router.get("/my", response_model=List[TaskRead])
def list_my_tasks(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Tasks assigned to the current user.
    """
    return task_service.list_my_tasks(db, current_user, skip, limit)


@router.get("/{task_id}", response_model=TaskRead)
def get_one_task(task_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return task_service.get_task(db, current_user, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
def update_existing_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return task_service.update_task(db, current_user, task_id, data)


@router.delete("/{task_id}", response_model=TaskRead)
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    """
    Soft delete a task.
    """
    return task_service.delete_task(db, current_user, task_id)


@router.post("/{task_id}/assign", response_model=TaskRead)
def assign_task(
    task_id: int,
    data: TaskAssign,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return task_service.assign_task(db, current_user, task_id, data.user_id)


@router.post("/{task_id}/unassign", response_model=TaskRead)
def unassign_task(task_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return task_service.unassign_task(db, current_user, task_id)


@router.get("/{task_id}/comments", response_model=List[CommentRead])
def list_task_comments(
    task_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return comment_service.list_comments_by_task(db, current_user, task_id, skip, limit)


@router.get("/{task_id}/attachments", response_model=List[AttachmentRead])
def list_task_attachments(
    task_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return attachment_service.list_attachments_by_task(db, current_user, task_id, skip, limit)
