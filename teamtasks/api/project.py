#teamtasks/api/project.py
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from teamtasks.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectStatusUpdate,
    ProjectTransfer,
    ProjectUpdate,
)
from teamtasks.schemas.task import TaskRead
from teamtasks.services import project_service, task_service
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as UserModel

logger = logging.getLogger("TaskHub.ProjectsAPI")

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Create a project inside a team (team owner or admin).
    """
    return project_service.create_project(db, current_user, data)


@router.get("/", response_model=List[ProjectRead])
def list_all_projects(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return project_service.list_all_projects(db, current_user, skip, limit)


@router.get("/owner/{owner_id}", response_model=List[ProjectRead])
def list_projects_by_owner(
    owner_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return project_service.list_projects_by_owner(db, current_user, owner_id, skip, limit)


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(project_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return project_service.get_project(db, current_user, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return project_service.update_project(db, current_user, project_id, data)


@router.put("/{project_id}/status", response_model=ProjectRead)
def update_project_status(
    project_id: int,
    data: ProjectStatusUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return project_service.update_project_status(db, current_user, project_id, data.status)


@router.post("/{project_id}/activate", response_model=ProjectRead)
def activate_project(project_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return project_service.activate_project(db, current_user, project_id)


@router.post("/{project_id}/archive", response_model=ProjectRead)
def archive_project(project_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return project_service.archive_project(db, current_user, project_id)


@router.post("/{project_id}/restore", response_model=ProjectRead)
def restore_project(project_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return project_service.restore_project(db, current_user, project_id)


@router.delete("/{project_id}", response_model=ProjectRead)
def delete_project(project_id: int, db: Session = Depends(get_db), current_user: UserModel = Depends(get_current_user)):
    return project_service.delete_project(db, current_user, project_id)


@router.post("/{project_id}/transfer", response_model=ProjectRead)
def transfer_project(
    project_id: int,
    data: ProjectTransfer,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Move the project to another team.
    """
    return project_service.transfer_project(db, current_user, project_id, data.team_id)


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return task_service.list_tasks_by_project(db, current_user, project_id, skip, limit)
