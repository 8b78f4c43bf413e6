#teamtasks/crud/task.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamtasks.models.enums import TeamStatus
from teamtasks.models.project import Project
from teamtasks.models.task import Task
from teamtasks.models.team import Team


def get_task(db: Session, task_id: int) -> Optional[Task]:
    return db.get(Task, task_id)


def task_title_taken(db: Session, project_id: int, title: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Task.id).filter(
        Task.project_id == project_id,
        func.lower(Task.title) == title.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(Task.id != exclude_id)
    return db.query(query.exists()).scalar()


def list_tasks(
    db: Session,
    project_id: Optional[int] = None,
    assigned_to: Optional[int] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Task]:
    query = db.query(Task)
    if project_id is not None:
        query = query.filter(Task.project_id == project_id)
    if assigned_to is not None:
        query = query.filter(Task.assigned_to == assigned_to)
    if not include_deleted:
        query = query.filter(Task.not_deleted())
    return query.order_by(Task.id).offset(skip).limit(limit).all()


def list_live_tasks_assigned_to(db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[Task]:
    """Live tasks of the user in live projects of active teams."""
    return (
        db.query(Task)
        .join(Project, Project.id == Task.project_id)
        .join(Team, Team.id == Project.team_id)
        .filter(
            Task.assigned_to == user_id,
            Task.not_deleted(),
            Project.not_deleted(),
            Team.status == TeamStatus.ACTIVE,
        )
        .order_by(Task.id)
        .offset(skip)
        .limit(limit)
        .all()
    )
