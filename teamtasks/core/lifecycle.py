# teamtasks/core/lifecycle.py
"""
Status state machines for every entity, plus the date rules that go with them.

Transition maps:

User         ACTIVE <-> INACTIVE, ACTIVE <-> SUSPENDED, * -> DELETED, DELETED -> ACTIVE
Team         ACTIVE -> DELETED, DELETED -> ACTIVE
TeamMember   ACTIVE -> REMOVED | INACTIVE, INACTIVE -> ACTIVE (team restore)
Project      keyed by target: PLANNED <- DELETED | ARCHIVED, ON_HOLD <- PLANNED | ACTIVE,
             ACTIVE <- PLANNED | ON_HOLD, COMPLETED <- ACTIVE,
             ARCHIVED <- COMPLETED | ON_HOLD, DELETED <- anything else
Task         free, DONE stamps completed_at
Comment      ACTIVE -> DELETED
Attachment   ACTIVE -> DELETED

Same-state transitions are never valid.
"""
from datetime import datetime
from typing import Dict, Optional, Set, Type

from teamtasks.core.clock import as_utc
from teamtasks.core.exceptions import (
    AlreadyDeletedError,
    InvalidDateError,
    InvalidProjectStatusError,
    InvalidRoleTransitionError,
    InvalidStatusTransitionError,
)
from teamtasks.models.enums import (
    AttachmentStatus,
    CommentStatus,
    MemberStatus,
    ProjectStatus,
    TaskStatus,
    TeamRole,
    TeamStatus,
    UserStatus,
)

# ==== Transition maps (source -> allowed targets) ====

USER_TRANSITIONS: Dict[UserStatus, Set[UserStatus]] = {
    UserStatus.ACTIVE: {UserStatus.INACTIVE, UserStatus.SUSPENDED, UserStatus.DELETED},
    UserStatus.INACTIVE: {UserStatus.ACTIVE, UserStatus.DELETED},
    UserStatus.SUSPENDED: {UserStatus.ACTIVE, UserStatus.DELETED},
    UserStatus.DELETED: {UserStatus.ACTIVE},
}

TEAM_TRANSITIONS: Dict[TeamStatus, Set[TeamStatus]] = {
    TeamStatus.ACTIVE: {TeamStatus.DELETED},
    TeamStatus.DELETED: {TeamStatus.ACTIVE},
    TeamStatus.ARCHIVED: set(),
}

MEMBER_TRANSITIONS: Dict[MemberStatus, Set[MemberStatus]] = {
    MemberStatus.ACTIVE: {MemberStatus.REMOVED, MemberStatus.INACTIVE},
    MemberStatus.INACTIVE: {MemberStatus.ACTIVE},
    MemberStatus.REMOVED: set(),
}

COMMENT_TRANSITIONS: Dict[CommentStatus, Set[CommentStatus]] = {
    CommentStatus.ACTIVE: {CommentStatus.DELETED},
    CommentStatus.DELETED: set(),
}

ATTACHMENT_TRANSITIONS: Dict[AttachmentStatus, Set[AttachmentStatus]] = {
    AttachmentStatus.ACTIVE: {AttachmentStatus.DELETED},
    AttachmentStatus.DELETED: set(),
}

# Project rules are keyed by target state.
PROJECT_ALLOWED_SOURCES: Dict[ProjectStatus, Set[ProjectStatus]] = {
    ProjectStatus.PLANNED: {ProjectStatus.DELETED, ProjectStatus.ARCHIVED},
    ProjectStatus.ON_HOLD: {ProjectStatus.PLANNED, ProjectStatus.ACTIVE},
    ProjectStatus.ACTIVE: {ProjectStatus.PLANNED, ProjectStatus.ON_HOLD},
    ProjectStatus.COMPLETED: {ProjectStatus.ACTIVE},
    ProjectStatus.ARCHIVED: {ProjectStatus.COMPLETED, ProjectStatus.ON_HOLD},
    ProjectStatus.DELETED: set(ProjectStatus) - {ProjectStatus.DELETED},
}

PROJECT_INITIAL_STATUSES: Set[ProjectStatus] = {
    ProjectStatus.PLANNED,
    ProjectStatus.ACTIVE,
    ProjectStatus.ON_HOLD,
}

# Targets that only a system ADMIN may request.
PROJECT_ADMIN_TARGETS: Set[ProjectStatus] = {
    ProjectStatus.PLANNED,
    ProjectStatus.ACTIVE,
    ProjectStatus.ARCHIVED,
    ProjectStatus.DELETED,
}


def is_valid_transition(transitions: Dict, old, new) -> bool:
    if old == new:
        return False
    return new in transitions.get(old, set())


def get_allowed_transitions(transitions: Dict, old) -> Set:
    return set(transitions.get(old, set()))


def _validate(transitions: Dict, old, new, error: Type[InvalidStatusTransitionError] = InvalidStatusTransitionError) -> None:
    if not is_valid_transition(transitions, old, new):
        raise error(old, new)


def validate_user_transition(old: UserStatus, new: UserStatus) -> None:
    _validate(USER_TRANSITIONS, old, new)


def validate_team_transition(old: TeamStatus, new: TeamStatus) -> None:
    _validate(TEAM_TRANSITIONS, old, new)


def validate_member_transition(old: MemberStatus, new: MemberStatus) -> None:
    _validate(MEMBER_TRANSITIONS, old, new)


def validate_comment_transition(old: CommentStatus, new: CommentStatus) -> None:
    _validate(COMMENT_TRANSITIONS, old, new)


def validate_attachment_transition(old: AttachmentStatus, new: AttachmentStatus) -> None:
    _validate(ATTACHMENT_TRANSITIONS, old, new)

# ==== Project ====

def is_valid_project_transition(old: ProjectStatus, new: ProjectStatus) -> bool:
    if old == new:
        return False
    return old in PROJECT_ALLOWED_SOURCES.get(new, set())


def validate_project_transition(old: ProjectStatus, new: ProjectStatus) -> None:
    if not is_valid_project_transition(old, new):
        raise InvalidProjectStatusError(old, new)


def resolve_initial_project_status(status: Optional[ProjectStatus]) -> ProjectStatus:
    """None means PLANNED; COMPLETED, ARCHIVED and DELETED are never initial states."""
    if status is None:
        return ProjectStatus.PLANNED
    if status not in PROJECT_INITIAL_STATUSES:
        raise InvalidProjectStatusError(
            None,
            status,
            message=f"Project cannot be created with status {status.value}; "
                    f"allowed: PLANNED, ACTIVE, ON_HOLD",
        )
    return status

# ==== Task ====

def apply_task_status(task, new_status: TaskStatus, now: datetime) -> None:
    """
    Sets the task status and keeps completed_at in step: stamped when the task
    becomes DONE, cleared when it leaves DONE.
    """
    old_status = task.status
    task.status = new_status
    if new_status == TaskStatus.DONE:
        if old_status != TaskStatus.DONE or task.completed_at is None:
            task.completed_at = now
    else:
        task.completed_at = None

# ==== Soft delete ====

def ensure_not_deleted(entity, message: str = "Resource is already deleted") -> None:
    if entity.is_deleted:
        raise AlreadyDeletedError(message)

# ==== Team roles ====

def validate_role_change(current: TeamRole, new: TeamRole, owner_count: int) -> None:
    """
    Role changes keep exactly one OWNER per team: the last owner cannot be
    demoted and nobody can be promoted to a second owner.
    """
    if current == new:
        raise InvalidRoleTransitionError(f"Member already has role {new.value}")
    if current == TeamRole.OWNER and owner_count <= 1:
        raise InvalidRoleTransitionError("Cannot demote the last owner of the team")
    if new == TeamRole.OWNER:
        raise InvalidRoleTransitionError("A team can have only one owner")

# ==== Dates ====

def validate_schedule(start: Optional[datetime], end: Optional[datetime], now: datetime) -> None:
    """Start and end must each be now or later, and end must not precede start."""
    start, end = as_utc(start), as_utc(end)
    if start is not None and start < now:
        raise InvalidDateError("Start date must be in the present or future")
    if end is not None and end < now:
        raise InvalidDateError("End date must be in the present or future")
    validate_date_order(start, end)


def validate_date_order(start: Optional[datetime], end: Optional[datetime]) -> None:
    start, end = as_utc(start), as_utc(end)
    if start is not None and end is not None and end < start:
        raise InvalidDateError("End date must not be before start date")
