# teamtasks/services/task_service.py
"""
Tasks: creation inside an ACTIVE project, updates, assignment and soft delete.
Access is decided through the task's project and its team.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import AccessFacts, Action, Resource
from teamtasks.core.exceptions import (
    DuplicateTaskTitle,
    InvalidProjectStatusError,
    InvalidStateError,
    InvalidStatusTransitionError,
    NoFieldsToUpdateError,
    ProjectNotFound,
    TaskNotFound,
    UserNotActiveError,
    UserNotFound,
)
from teamtasks.crud import project as project_crud
from teamtasks.crud import task as task_crud
from teamtasks.crud import user as user_crud
from teamtasks.database import commit
from teamtasks.models.enums import ProjectStatus, TaskStatus
from teamtasks.models.task import Task
from teamtasks.models.user import User
from teamtasks.schemas.task import TaskCreate, TaskUpdate
from teamtasks.services.common import membership_of, page_bounds, require_text
from teamtasks.services.project_service import load_visible_project
from teamtasks.services.team_service import load_active_team

logger = logging.getLogger("TaskHub.Tasks")


def load_visible_task(db: Session, actor: User, task_id: int) -> Task:
    """Administrators see deleted tasks too."""
    task = task_crud.get_task(db, task_id)
    if task is None:
        raise TaskNotFound()
    if task.is_deleted and not authz.is_system_admin(actor):
        raise TaskNotFound()
    load_visible_project(db, actor, task.project_id)
    return task


def load_live_task(db: Session, actor: User, task_id: int) -> Task:
    task = task_crud.get_task(db, task_id)
    if task is None or task.is_deleted:
        raise TaskNotFound()
    load_visible_project(db, actor, task.project_id)
    return task


def task_facts(db: Session, actor: User, task: Task, **extra) -> AccessFacts:
    return AccessFacts(membership=membership_of(db, task.project.team_id, actor.id), **extra)


def _load_assignee(db: Session, user_id: int) -> User:
    user = user_crud.get_user(db, user_id)
    if user is None or user.is_deleted:
        raise UserNotFound()
    return user


def _authorize_assignment(db: Session, actor: User, team_id: int, assignee: User) -> None:
    facts = AccessFacts(
        membership=membership_of(db, team_id, actor.id),
        assignee_id=assignee.id,
        assignee_membership=membership_of(db, team_id, assignee.id),
    )
    authz.authorize(actor, Resource.TASK, Action.ASSIGN, facts)
    if not assignee.is_active:
        raise UserNotActiveError("Tasks can only be assigned to active users")


def create_task(db: Session, actor: User, data: TaskCreate) -> Task:
    authz.ensure_active(actor)
    project = project_crud.get_project(db, data.project_id)
    if project is None or project.is_deleted:
        raise ProjectNotFound()
    load_active_team(db, project.team_id)
    authz.authorize(actor, Resource.TASK, Action.CREATE, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))
    if project.status != ProjectStatus.ACTIVE:
        raise InvalidProjectStatusError(
            project.status, ProjectStatus.ACTIVE, message="Tasks can only be created in ACTIVE projects"
        )
    title = require_text(data.title, "Task title")
    if data.status == TaskStatus.DELETED:
        raise InvalidStatusTransitionError(None, TaskStatus.DELETED, message="A task cannot be created as DELETED")
    if task_crud.task_title_taken(db, project.id, title):
        raise DuplicateTaskTitle()
    assignee = None
    if data.assigned_to is not None:
        assignee = _load_assignee(db, data.assigned_to)
        _authorize_assignment(db, actor, project.team_id, assignee)

    now = clock.utcnow()
    task = Task(
        title=title,
        description=data.description,
        project_id=project.id,
        priority=data.priority,
        status=TaskStatus.TO_DO,
        assigned_to=assignee.id if assignee else None,
        due_date=data.due_date,
    )
    lifecycle.apply_task_status(task, data.status, now)
    task.stamp_created(actor.id, now)
    db.add(task)
    commit(db, DuplicateTaskTitle())
    logger.info(f"User {actor.id} created task '{task.title}' (ID: {task.id}) in project {project.id}")
    return task


def get_task(db: Session, actor: User, task_id: int) -> Task:
    authz.ensure_active(actor)
    task = load_visible_task(db, actor, task_id)
    authz.authorize(actor, Resource.TASK, Action.READ, task_facts(db, actor, task))
    return task


def list_tasks_by_project(db: Session, actor: User, project_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Task]:
    authz.ensure_active(actor)
    project = load_visible_project(db, actor, project_id)
    authz.authorize(actor, Resource.TASK, Action.READ, AccessFacts(membership=membership_of(db, project.team_id, actor.id)))
    skip, limit = page_bounds(skip, limit)
    return task_crud.list_tasks(
        db, project_id=project.id, include_deleted=authz.is_system_admin(actor), skip=skip, limit=limit
    )


def list_my_tasks(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Task]:
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    return task_crud.list_live_tasks_assigned_to(db, actor.id, skip=skip, limit=limit)


def list_all_tasks(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Task]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.TASK, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return task_crud.list_tasks(db, include_deleted=True, skip=skip, limit=limit)


def update_task(db: Session, actor: User, task_id: int, data: TaskUpdate) -> Task:
    """Administrators, team OWNER/ADMIN members and the assignee may update."""
    authz.ensure_active(actor)
    task = load_live_task(db, actor, task_id)
    authz.authorize(actor, Resource.TASK, Action.UPDATE, task_facts(db, actor, task, assignee_id=task.assigned_to))
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise NoFieldsToUpdateError()
    if changes.get("status") == TaskStatus.DELETED:
        raise InvalidStatusTransitionError(task.status, TaskStatus.DELETED, message="Use delete to remove a task")

    if "title" in changes:
        title = require_text(changes["title"], "Task title")
        if task_crud.task_title_taken(db, task.project_id, title, exclude_id=task.id):
            raise DuplicateTaskTitle()
        task.title = title
    for field in ("description", "priority", "due_date"):
        if field in changes:
            setattr(task, field, changes[field])
    now = clock.utcnow()
    if "status" in changes:
        lifecycle.apply_task_status(task, changes["status"], now)

    task.stamp_updated(actor.id, now)
    commit(db, DuplicateTaskTitle())
    logger.info(f"User {actor.id} updated task {task.id}: {sorted(changes.keys())}")
    return task


def delete_task(db: Session, actor: User, task_id: int) -> Task:
    authz.ensure_active(actor)
    task = task_crud.get_task(db, task_id)
    if task is None:
        raise TaskNotFound()
    lifecycle.ensure_not_deleted(task, "Task is already deleted")
    load_visible_project(db, actor, task.project_id)
    authz.authorize(actor, Resource.TASK, Action.DELETE, task_facts(db, actor, task))
    now = clock.utcnow()
    lifecycle.apply_task_status(task, TaskStatus.DELETED, now)
    task.stamp_updated(actor.id, now)
    commit(db)
    logger.info(f"User {actor.id} deleted task {task.id}")
    return task


def assign_task(db: Session, actor: User, task_id: int, user_id: int) -> Task:
    """
    The assignee must belong to the task's team. Members without the OWNER or
    ADMIN team role can only assign tasks to themselves.
    """
    authz.ensure_active(actor)
    task = load_live_task(db, actor, task_id)
    assignee = _load_assignee(db, user_id)
    _authorize_assignment(db, actor, task.project.team_id, assignee)
    task.assigned_to = assignee.id
    task.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} assigned task {task.id} to user {assignee.id}")
    return task


def unassign_task(db: Session, actor: User, task_id: int) -> Task:
    authz.ensure_active(actor)
    task = load_live_task(db, actor, task_id)
    authz.authorize(actor, Resource.TASK, Action.UPDATE, task_facts(db, actor, task, assignee_id=task.assigned_to))
    if task.assigned_to is None:
        raise InvalidStateError("Task is not assigned to anyone", code="TASK_NOT_ASSIGNED")
    previous = task.assigned_to
    task.assigned_to = None
    task.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} unassigned user {previous} from task {task.id}")
    return task
