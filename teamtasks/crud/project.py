#teamtasks/crud/project.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamtasks.models.project import Project


def get_project(db: Session, project_id: int) -> Optional[Project]:
    return db.get(Project, project_id)


def project_name_taken(db: Session, team_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Project.id).filter(
        Project.team_id == team_id,
        func.lower(Project.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(Project.id != exclude_id)
    return db.query(query.exists()).scalar()


def list_projects(
    db: Session,
    team_id: Optional[int] = None,
    created_by: Optional[int] = None,
    include_deleted: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Project]:
    query = db.query(Project)
    if team_id is not None:
        query = query.filter(Project.team_id == team_id)
    if created_by is not None:
        query = query.filter(Project.created_by == created_by)
    if not include_deleted:
        query = query.filter(Project.not_deleted())
    return query.order_by(Project.id).offset(skip).limit(limit).all()
