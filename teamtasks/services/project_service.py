# teamtasks/services/project_service.py
"""
Projects: creation inside a team, lookups, updates, status transitions
and transfer between teams.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import AccessFacts, Action, Resource
from teamtasks.core.exceptions import (
    AccessDeniedError,
    DuplicateProjectName,
    InvalidInputError,
    NoFieldsToUpdateError,
    ProjectNotFound,
    TeamNotFound,
)
from teamtasks.crud import project as project_crud
from teamtasks.crud import team as team_crud
from teamtasks.database import commit
from teamtasks.models.enums import ProjectStatus, TeamStatus
from teamtasks.models.project import Project
from teamtasks.models.user import User
from teamtasks.schemas.project import ProjectCreate, ProjectUpdate
from teamtasks.services.common import membership_of, page_bounds, require_text
from teamtasks.services.team_service import load_active_team

logger = logging.getLogger("TaskHub.Projects")


def load_visible_project(db: Session, actor: User, project_id: int) -> Project:
    """
    Administrators see every project. Others only see live projects of
    active teams.
    """
    project = project_crud.get_project(db, project_id)
    if project is None:
        raise ProjectNotFound()
    if authz.is_system_admin(actor):
        return project
    if project.is_deleted:
        raise ProjectNotFound()
    team = team_crud.get_team(db, project.team_id)
    if team is None or team.status != TeamStatus.ACTIVE:
        raise TeamNotFound()
    return project


def create_project(db: Session, actor: User, data: ProjectCreate) -> Project:
    authz.ensure_active(actor)
    team = load_active_team(db, data.team_id)
    authz.authorize(actor, Resource.PROJECT, Action.CREATE, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    name = require_text(data.name, "Project name")
    status = lifecycle.resolve_initial_project_status(data.status)
    now = clock.utcnow()
    lifecycle.validate_schedule(data.start_date, data.end_date, now)
    if project_crud.project_name_taken(db, team.id, name):
        raise DuplicateProjectName()
    project = Project(
        name=name,
        description=data.description,
        team_id=team.id,
        status=status,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    project.stamp_created(actor.id, now)
    db.add(project)
    commit(db, DuplicateProjectName())
    logger.info(f"User {actor.id} created project '{project.name}' (ID: {project.id}) in team {team.id}")
    return project


def get_project(db: Session, actor: User, project_id: int) -> Project:
    authz.ensure_active(actor)
    project = load_visible_project(db, actor, project_id)
    authz.authorize(actor, Resource.PROJECT, Action.READ, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))
    return project


def list_projects_by_team(db: Session, actor: User, team_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Project]:
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    authz.authorize(actor, Resource.PROJECT, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    skip, limit = page_bounds(skip, limit)
    return project_crud.list_projects(
        db, team_id=team.id, include_deleted=authz.is_system_admin(actor), skip=skip, limit=limit
    )


def list_projects_by_owner(db: Session, actor: User, owner_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Project]:
    """Projects created by `owner_id`; self or administrators."""
    authz.ensure_active(actor)
    is_admin = authz.is_system_admin(actor)
    if not is_admin and actor.id != owner_id:
        raise AccessDeniedError("You can only list your own projects")
    skip, limit = page_bounds(skip, limit)
    return project_crud.list_projects(db, created_by=owner_id, include_deleted=is_admin, skip=skip, limit=limit)


def list_all_projects(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Project]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.PROJECT, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return project_crud.list_projects(db, include_deleted=True, skip=skip, limit=limit)


def _authorize_status_change(db: Session, actor: User, project: Project, new_status: ProjectStatus) -> None:
    """PLANNED, ACTIVE, ARCHIVED and DELETED are administrator actions."""
    if new_status in lifecycle.PROJECT_ADMIN_TARGETS:
        authz.authorize(actor, Resource.PROJECT, Action.ADMINISTER)
    else:
        authz.authorize(actor, Resource.PROJECT, Action.UPDATE, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))


def _apply_status(db: Session, project: Project, new_status: ProjectStatus) -> None:
    lifecycle.validate_project_transition(project.status, new_status)
    if new_status == ProjectStatus.ACTIVE:
        lifecycle.validate_schedule(project.start_date, project.end_date, clock.utcnow())
    if new_status == ProjectStatus.PLANNED:
        load_active_team(db, project.team_id)
    project.status = new_status


def update_project(db: Session, actor: User, project_id: int, data: ProjectUpdate) -> Project:
    authz.ensure_active(actor)
    project = project_crud.get_project(db, project_id)
    if project is None or project.is_deleted:
        raise ProjectNotFound()
    load_active_team(db, project.team_id)
    authz.authorize(actor, Resource.PROJECT, Action.UPDATE, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise NoFieldsToUpdateError()
    new_status = changes.get("status")
    if new_status is not None:
        _authorize_status_change(db, actor, project, new_status)

    if "name" in changes:
        name = require_text(changes["name"], "Project name")
        if project_crud.project_name_taken(db, project.team_id, name, exclude_id=project.id):
            raise DuplicateProjectName()
        project.name = name
    if "description" in changes:
        project.description = changes["description"]
    if "start_date" in changes or "end_date" in changes:
        lifecycle.validate_schedule(changes.get("start_date"), changes.get("end_date"), clock.utcnow())
        start = changes.get("start_date", project.start_date)
        end = changes.get("end_date", project.end_date)
        lifecycle.validate_date_order(start, end)
        project.start_date = start
        project.end_date = end
    if new_status is not None:
        _apply_status(db, project, new_status)

    project.stamp_updated(actor.id)
    commit(db, DuplicateProjectName())
    logger.info(f"User {actor.id} updated project {project.id}: {sorted(changes.keys())}")
    return project


def update_project_status(db: Session, actor: User, project_id: int, new_status: ProjectStatus) -> Project:
    authz.ensure_active(actor)
    project = project_crud.get_project(db, project_id)
    if project is None:
        raise ProjectNotFound()
    if not authz.is_system_admin(actor) and project.is_deleted:
        raise ProjectNotFound()
    _authorize_status_change(db, actor, project, new_status)
    old_status = project.status
    _apply_status(db, project, new_status)
    project.stamp_updated(actor.id)
    commit(db, DuplicateProjectName())
    logger.info(f"User {actor.id} moved project {project.id} from {old_status.value} to {new_status.value}")
    return project


def activate_project(db: Session, actor: User, project_id: int) -> Project:
    return update_project_status(db, actor, project_id, ProjectStatus.ACTIVE)


def archive_project(db: Session, actor: User, project_id: int) -> Project:
    return update_project_status(db, actor, project_id, ProjectStatus.ARCHIVED)


def restore_project(db: Session, actor: User, project_id: int) -> Project:
    """DELETED or ARCHIVED -> PLANNED."""
    return update_project_status(db, actor, project_id, ProjectStatus.PLANNED)


def delete_project(db: Session, actor: User, project_id: int) -> Project:
    return update_project_status(db, actor, project_id, ProjectStatus.DELETED)


def transfer_project(db: Session, actor: User, project_id: int, new_team_id: int) -> Project:
    """
    Moves a live project to another active team. Administrators, or the
    owner of both teams.
    """
    authz.ensure_active(actor)
    project = project_crud.get_project(db, project_id)
    if project is None or project.is_deleted:
        raise ProjectNotFound()
    target = load_active_team(db, new_team_id)
    authz.authorize(actor, Resource.PROJECT, Action.CREATE, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))
    authz.authorize(actor, Resource.PROJECT, Action.CREATE, AccessFacts(membership=membership_of(db, target.id, actor.id)))
    if target.id == project.team_id:
        raise InvalidInputError("New team must be different from the current team")
    if project_crud.project_name_taken(db, target.id, project.name):
        raise DuplicateProjectName()
    old_team_id = project.team_id
    project.team_id = target.id
    project.stamp_updated(actor.id)
    commit(db, DuplicateProjectName())
    logger.info(f"User {actor.id} transferred project {project.id} from team {old_team_id} to team {target.id}")
    return project
