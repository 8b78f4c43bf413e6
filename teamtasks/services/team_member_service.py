# teamtasks/services/team_member_service.py
"""
Team membership: add, remove, role changes, leaving and member listings.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import AccessFacts, Action, Resource
from teamtasks.core.exceptions import (
    AccessDeniedError,
    InvalidRoleTransitionError,
    TeamMemberNotFound,
    UserAlreadyInTeam,
    UserNotActiveError,
    UserNotFound,
)
from teamtasks.crud import team as team_crud
from teamtasks.crud import user as user_crud
from teamtasks.database import commit
from teamtasks.models.enums import MemberStatus, TeamRole
from teamtasks.models.team import TeamMember
from teamtasks.models.user import User
from teamtasks.services.common import membership_of, page_bounds
from teamtasks.services.team_service import load_active_team

logger = logging.getLogger("TaskHub.TeamMembers")


def _load_member(db: Session, team_id: int, user_id: int) -> TeamMember:
    member = team_crud.get_membership(db, team_id, user_id)
    if member is None:
        raise TeamMemberNotFound()
    return member


def add_member(db: Session, actor: User, team_id: int, user_id: int, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    user = user_crud.get_user(db, user_id)
    if user is None or user.is_deleted:
        raise UserNotFound()
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.MANAGE, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    if not user.is_active:
        raise UserNotActiveError("Only active users can be added to a team")
    if role == TeamRole.OWNER:
        raise InvalidRoleTransitionError("A team can have only one owner")
    if team_crud.get_membership(db, team.id, user.id) is not None:
        raise UserAlreadyInTeam()
    now = clock.utcnow()
    member = TeamMember(
        team_id=team.id,
        user_id=user.id,
        role=role,
        status=MemberStatus.ACTIVE,
        joined_at=now,
    )
    member.stamp_created(actor.id, now)
    db.add(member)
    commit(db, UserAlreadyInTeam())
    logger.info(f"User {actor.id} added user {user.id} to team {team.id} as {role.value}")
    return member


def remove_member(db: Session, actor: User, team_id: int, user_id: int) -> TeamMember:
    """ACTIVE -> REMOVED. The owner can neither remove themself nor be removed."""
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    member = _load_member(db, team.id, user_id)
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.MANAGE, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    authz.ensure_not_self(actor, user_id, "You cannot remove yourself from the team; use leave instead")
    if member.role == TeamRole.OWNER and team_crud.count_owners(db, team.id) <= 1:
        raise InvalidRoleTransitionError("Cannot remove the last owner of the team")
    lifecycle.validate_member_transition(member.status, MemberStatus.REMOVED)
    member.status = MemberStatus.REMOVED
    member.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} removed user {user_id} from team {team.id}")
    return member


def update_member_role(db: Session, actor: User, team_id: int, user_id: int, new_role: TeamRole) -> TeamMember:
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    member = _load_member(db, team.id, user_id)
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.MANAGE, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    authz.ensure_not_self(actor, user_id, "You cannot change your own team role")
    if not member.is_active:
        raise TeamMemberNotFound("User is not an active member of this team")
    lifecycle.validate_role_change(member.role, new_role, team_crud.count_owners(db, team.id))
    old_role = member.role
    member.role = new_role
    member.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} changed role of user {user_id} in team {team.id}: {old_role.value} -> {new_role.value}")
    return member


def leave_team(db: Session, actor: User, team_id: int) -> TeamMember:
    """
    ACTIVE -> INACTIVE for the actor's own membership. The last active member
    and the owner cannot leave.
    """
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    member = team_crud.get_membership(db, team.id, actor.id)
    if member is None or not member.is_active:
        raise TeamMemberNotFound("You are not an active member of this team")
    if team_crud.count_members(db, team.id, MemberStatus.ACTIVE) <= 1:
        raise AccessDeniedError("Cannot leave: you are the last active member of the team")
    if member.role == TeamRole.OWNER and team_crud.count_owners(db, team.id) <= 1:
        raise AccessDeniedError("Cannot leave: you are the last owner of the team")
    lifecycle.validate_member_transition(member.status, MemberStatus.INACTIVE)
    member.status = MemberStatus.INACTIVE
    member.stamp_updated(actor.id)
    commit(db)
    logger.info(f"User {actor.id} left team {team.id}")
    return member


def list_members(db: Session, actor: User, team_id: int, skip: int = 0, limit: Optional[int] = None) -> List[TeamMember]:
    """Active members see the ACTIVE rows; administrators see every row."""
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    skip, limit = page_bounds(skip, limit)
    status = None if authz.is_system_admin(actor) else MemberStatus.ACTIVE
    return team_crud.list_members(db, team.id, status=status, skip=skip, limit=limit)


def get_member(db: Session, actor: User, team_id: int, user_id: int) -> TeamMember:
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    member = _load_member(db, team.id, user_id)
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    return member


def count_members(db: Session, actor: User, team_id: int) -> tuple[int, int]:
    """Returns (all membership rows, active memberships)."""
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    authz.authorize(actor, Resource.TEAM_MEMBER, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    return team_crud.count_members(db, team.id), team_crud.count_members(db, team.id, MemberStatus.ACTIVE)
