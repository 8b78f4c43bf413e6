# teamtasks/core/authorization.py
"""
Authorization engine.

Every permission rule of the application lives here, keyed by
(resource kind, action). Decisions are pure: they only look at the actor and
the facts passed in (membership row, author id, assignee), never at the
database. Services load the facts, then call `authorize(...)`.

A system ADMIN passes every team/project/task scoped rule. The "actor is
active" check and business guards (self-protection, last admin) are separate
and apply to admins as well.
"""
from dataclasses import dataclass
import enum
import logging
from typing import Callable, Dict, Optional, Tuple

from teamtasks.core.exceptions import (
    AccessDeniedError,
    LastAdminProtectedError,
    NotAuthenticatedError,
    SelfOperationNotAllowedError,
    UserNotActiveError,
)
from teamtasks.models.enums import MemberStatus, TeamRole, UserRole, UserStatus

logger = logging.getLogger("TaskHub.Authorization")


class Resource(str, enum.Enum):
    TEAM = "team"
    TEAM_MEMBER = "team_member"
    PROJECT = "project"
    TASK = "task"
    COMMENT = "comment"
    ATTACHMENT = "attachment"
    USER = "user"
    SYSTEM = "system"


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CHANGE_STATUS = "change_status"
    MANAGE = "manage"
    ASSIGN = "assign"
    ADMINISTER = "administer"


@dataclass(frozen=True)
class AccessFacts:
    """
    Facts a decision may depend on.

    membership:           the actor's row in the owning team, if any
    owner_id:             author / uploader / target user of the resource
    assignee_id:          user a task is (or is about to be) assigned to
    assignee_membership:  that user's row in the owning team
    """
    membership: Optional[object] = None
    owner_id: Optional[int] = None
    assignee_id: Optional[int] = None
    assignee_membership: Optional[object] = None


NO_FACTS = AccessFacts()

# ==== Basic predicates ====

def is_system_admin(actor) -> bool:
    return actor is not None and actor.role == UserRole.ADMIN


def is_member(membership) -> bool:
    """A membership row exists, whatever its status."""
    return membership is not None


def is_active_member(membership) -> bool:
    return membership is not None and membership.status == MemberStatus.ACTIVE


def has_team_role(membership, *roles: TeamRole) -> bool:
    return is_active_member(membership) and membership.role in roles


def is_team_owner(membership) -> bool:
    return has_team_role(membership, TeamRole.OWNER)


def is_team_manager(membership) -> bool:
    """OWNER or ADMIN role inside the team."""
    return has_team_role(membership, TeamRole.OWNER, TeamRole.ADMIN)


def is_self(actor, user_id: Optional[int]) -> bool:
    return user_id is not None and actor.id == user_id


def is_last_admin(user, other_active_admin_exists: bool) -> bool:
    """True when `user` is an active ADMIN and nobody else is."""
    return (
        user.role == UserRole.ADMIN
        and user.status == UserStatus.ACTIVE
        and not other_active_admin_exists
    )

# ==== Rules ====

Rule = Callable[[object, AccessFacts], bool]


def _team_access(actor, facts: AccessFacts) -> bool:
    return is_member(facts.membership)


def _active_membership(actor, facts: AccessFacts) -> bool:
    return is_active_member(facts.membership)


def _team_manager(actor, facts: AccessFacts) -> bool:
    return is_team_manager(facts.membership)


def _team_owner(actor, facts: AccessFacts) -> bool:
    return is_team_owner(facts.membership)


def _task_modify(actor, facts: AccessFacts) -> bool:
    return is_team_manager(facts.membership) or is_self(actor, facts.assignee_id)


def _task_assign(actor, facts: AccessFacts) -> bool:
    if not is_member(facts.assignee_membership):
        return False
    return is_team_manager(facts.membership) or is_self(actor, facts.assignee_id)


def _author(actor, facts: AccessFacts) -> bool:
    return is_self(actor, facts.owner_id)


def _author_or_team_manager(actor, facts: AccessFacts) -> bool:
    return is_self(actor, facts.owner_id) or is_team_manager(facts.membership)


def _admin_only(actor, facts: AccessFacts) -> bool:
    return False


RULES: Dict[Tuple[Resource, Action], Rule] = {
    (Resource.TEAM, Action.READ): _team_access,
    (Resource.TEAM, Action.UPDATE): _team_manager,
    (Resource.TEAM, Action.CHANGE_STATUS): _team_owner,
    (Resource.TEAM, Action.DELETE): _team_owner,
    (Resource.TEAM, Action.ADMINISTER): _admin_only,

    (Resource.TEAM_MEMBER, Action.READ): _active_membership,
    (Resource.TEAM_MEMBER, Action.MANAGE): _team_owner,

    (Resource.PROJECT, Action.READ): _team_access,
    (Resource.PROJECT, Action.CREATE): _team_owner,
    (Resource.PROJECT, Action.UPDATE): _team_manager,
    (Resource.PROJECT, Action.ADMINISTER): _admin_only,

    (Resource.TASK, Action.READ): _team_access,
    (Resource.TASK, Action.CREATE): _team_access,
    (Resource.TASK, Action.UPDATE): _task_modify,
    (Resource.TASK, Action.DELETE): _team_manager,
    (Resource.TASK, Action.ASSIGN): _task_assign,
    (Resource.TASK, Action.ADMINISTER): _admin_only,

    (Resource.COMMENT, Action.READ): _team_access,
    (Resource.COMMENT, Action.CREATE): _team_access,
    (Resource.COMMENT, Action.UPDATE): _author,
    (Resource.COMMENT, Action.DELETE): _author_or_team_manager,
    (Resource.COMMENT, Action.ADMINISTER): _admin_only,

    (Resource.ATTACHMENT, Action.READ): _team_access,
    (Resource.ATTACHMENT, Action.CREATE): _team_access,
    (Resource.ATTACHMENT, Action.UPDATE): _author,
    (Resource.ATTACHMENT, Action.DELETE): _author_or_team_manager,
    (Resource.ATTACHMENT, Action.ADMINISTER): _admin_only,

    (Resource.USER, Action.READ): _author,
    (Resource.USER, Action.UPDATE): _author,
    (Resource.USER, Action.ADMINISTER): _admin_only,

    (Resource.SYSTEM, Action.ADMINISTER): _admin_only,
}

DENIAL_MESSAGES: Dict[Tuple[Resource, Action], str] = {
    (Resource.TEAM, Action.READ): "You are not a member of this team",
    (Resource.TEAM, Action.UPDATE): "Only the team owner or a team admin can update this team",
    (Resource.TEAM, Action.CHANGE_STATUS): "Only the team owner can change the team status",
    (Resource.TEAM, Action.DELETE): "Only the team owner can delete this team",
    (Resource.TEAM_MEMBER, Action.READ): "Only active team members can view the member list",
    (Resource.TEAM_MEMBER, Action.MANAGE): "Only the team owner can manage team members",
    (Resource.PROJECT, Action.READ): "You do not have access to this project",
    (Resource.PROJECT, Action.CREATE): "Only the team owner can create projects",
    (Resource.PROJECT, Action.UPDATE): "Only the team owner or a team admin can update this project",
    (Resource.TASK, Action.READ): "You do not have access to this task",
    (Resource.TASK, Action.CREATE): "You must be a team member to create tasks",
    (Resource.TASK, Action.UPDATE): "You do not have permission to modify this task",
    (Resource.TASK, Action.DELETE): "Only the team owner or a team admin can delete tasks",
    (Resource.TASK, Action.ASSIGN): "You cannot assign this task to that user",
    (Resource.COMMENT, Action.READ): "You do not have access to this comment",
    (Resource.COMMENT, Action.CREATE): "You do not have access to this task",
    (Resource.COMMENT, Action.UPDATE): "Only the author can edit this comment",
    (Resource.COMMENT, Action.DELETE): "You do not have permission to delete this comment",
    (Resource.ATTACHMENT, Action.READ): "You do not have access to this attachment",
    (Resource.ATTACHMENT, Action.CREATE): "You do not have access to this task",
    (Resource.ATTACHMENT, Action.DELETE): "You do not have permission to delete this attachment",
    (Resource.USER, Action.READ): "You can only view your own profile",
    (Resource.USER, Action.UPDATE): "You can only update your own profile",
}


def is_allowed(actor, resource: Resource, action: Action, facts: AccessFacts = NO_FACTS) -> bool:
    if actor is None:
        return False
    if is_system_admin(actor):
        return True
    rule = RULES.get((resource, action))
    if rule is None:
        return False
    return rule(actor, facts)


def authorize(actor, resource: Resource, action: Action, facts: AccessFacts = NO_FACTS) -> None:
    """Raises AccessDeniedError unless `actor` may perform `action` on `resource`."""
    if not is_allowed(actor, resource, action, facts):
        message = DENIAL_MESSAGES.get((resource, action), "Administrator privileges required")
        logger.warning(
            f"Denied {action.value} on {resource.value} for user {getattr(actor, 'id', None)}"
        )
        raise AccessDeniedError(message)

# ==== Actor and business guards ====

def ensure_authenticated(actor) -> None:
    if actor is None:
        raise NotAuthenticatedError("Authentication required")


def ensure_active(actor) -> None:
    """The actor must be authenticated and ACTIVE."""
    ensure_authenticated(actor)
    if actor.status != UserStatus.ACTIVE:
        raise UserNotActiveError()


def ensure_not_self(actor, user_id: int, message: str = "This operation cannot be applied to your own account") -> None:
    if is_self(actor, user_id):
        raise SelfOperationNotAllowedError(message)


def ensure_not_last_admin(user, other_active_admin_exists: bool) -> None:
    if is_last_admin(user, other_active_admin_exists):
        raise LastAdminProtectedError()


def ensure_privileged_fields_allowed(actor, requested_fields) -> None:
    """Role, status and email verification changes are reserved to ADMIN, even on oneself."""
    if requested_fields and not is_system_admin(actor):
        raise AccessDeniedError(
            f"Only administrators can change: {', '.join(sorted(requested_fields))}"
        )
