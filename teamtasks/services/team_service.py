# teamtasks/services/team_service.py
"""
Teams: creation (with the owner membership), lookups, updates, soft delete
and restore.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from teamtasks.core import authorization as authz, clock, lifecycle
from teamtasks.core.authorization import AccessFacts, Action, Resource
from teamtasks.core.exceptions import (
    AccessDeniedError,
    DuplicateTeamName,
    InvalidInputError,
    InvalidStateError,
    NoFieldsToUpdateError,
    TeamNotFound,
)
from teamtasks.crud import team as team_crud
from teamtasks.database import commit, flush
from teamtasks.models.enums import MemberStatus, TeamRole, TeamStatus
from teamtasks.models.team import Team, TeamMember
from teamtasks.models.user import User
from teamtasks.schemas.team import TeamCreate, TeamUpdate
from teamtasks.services.common import membership_of, page_bounds, require_text

logger = logging.getLogger("TaskHub.Teams")


def load_active_team(db: Session, team_id: int) -> Team:
    team = team_crud.get_team(db, team_id)
    if team is None or team.status != TeamStatus.ACTIVE:
        raise TeamNotFound()
    return team


def create_team(db: Session, actor: User, data: TeamCreate) -> Team:
    """The creator becomes owner and the first ACTIVE member."""
    authz.ensure_active(actor)
    name = require_text(data.name, "Team name")
    if team_crud.team_name_taken(db, name):
        raise DuplicateTeamName()
    now = clock.utcnow()
    team = Team(
        name=name,
        description=data.description,
        owner_id=actor.id,
        status=TeamStatus.ACTIVE,
    )
    team.stamp_created(actor.id, now)
    db.add(team)
    flush(db, DuplicateTeamName())
    owner = TeamMember(
        team_id=team.id,
        user_id=actor.id,
        role=TeamRole.OWNER,
        status=MemberStatus.ACTIVE,
        joined_at=now,
    )
    owner.stamp_created(actor.id, now)
    db.add(owner)
    commit(db, DuplicateTeamName())
    logger.info(f"User {actor.id} created team '{team.name}' (ID: {team.id})")
    return team


def get_team(db: Session, actor: User, team_id: int) -> Team:
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    authz.authorize(actor, Resource.TEAM, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    return team


def get_team_by_name(db: Session, actor: User, name: str) -> Team:
    authz.ensure_active(actor)
    if not name or not name.strip():
        raise InvalidInputError("Team name must not be blank")
    team = team_crud.get_team_by_name(db, name)
    if team is None or team.status != TeamStatus.ACTIVE:
        raise TeamNotFound()
    authz.authorize(actor, Resource.TEAM, Action.READ, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    return team


def list_my_teams(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Team]:
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    return team_crud.list_active_teams_for_user(db, actor.id, skip=skip, limit=limit)


def list_teams_by_owner(db: Session, actor: User, owner_id: int, skip: int = 0, limit: Optional[int] = None) -> List[Team]:
    """Administrators see every team of the owner; owners see their active teams."""
    authz.ensure_active(actor)
    skip, limit = page_bounds(skip, limit)
    if authz.is_system_admin(actor):
        return team_crud.list_teams(db, owner_id=owner_id, skip=skip, limit=limit)
    if actor.id != owner_id:
        raise AccessDeniedError("You can only list your own teams")
    return team_crud.list_teams(db, owner_id=owner_id, status=TeamStatus.ACTIVE, skip=skip, limit=limit)


def list_all_teams(db: Session, actor: User, skip: int = 0, limit: Optional[int] = None) -> List[Team]:
    authz.ensure_active(actor)
    authz.authorize(actor, Resource.TEAM, Action.ADMINISTER)
    skip, limit = page_bounds(skip, limit)
    return team_crud.list_teams(db, skip=skip, limit=limit)


def update_team(db: Session, actor: User, team_id: int, data: TeamUpdate) -> Team:
    authz.ensure_active(actor)
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    team = load_active_team(db, team_id)
    membership = membership_of(db, team.id, actor.id)
    authz.authorize(actor, Resource.TEAM, Action.UPDATE, AccessFacts(membership=membership))
    if "status" in changes and changes["status"] != team.status:
        authz.authorize(actor, Resource.TEAM, Action.CHANGE_STATUS, AccessFacts(membership=membership))
    if not changes:
        raise NoFieldsToUpdateError()

    if "name" in changes:
        name = require_text(changes["name"], "Team name")
        if team_crud.team_name_taken(db, name, exclude_id=team.id):
            raise DuplicateTeamName()
        team.name = name
    if "description" in changes:
        team.description = changes["description"]
    if "status" in changes and changes["status"] != team.status:
        _apply_status(db, actor, team, changes["status"])

    team.stamp_updated(actor.id)
    commit(db, DuplicateTeamName())
    logger.info(f"User {actor.id} updated team {team.id}: {sorted(changes.keys())}")
    return team


def _apply_status(db: Session, actor: User, team: Team, new_status: TeamStatus) -> None:
    """Team status change plus the matching bulk membership transition."""
    lifecycle.validate_team_transition(team.status, new_status)
    now = clock.utcnow()
    if new_status == TeamStatus.DELETED:
        moved = team_crud.bulk_update_member_status(
            db, team.id, MemberStatus.ACTIVE, MemberStatus.INACTIVE, actor.id, now
        )
    else:
        moved = team_crud.bulk_update_member_status(
            db, team.id, MemberStatus.INACTIVE, MemberStatus.ACTIVE, actor.id, now
        )
    team.status = new_status
    team.stamp_updated(actor.id, now)
    logger.info(f"Team {team.id} -> {new_status.value}, {moved} memberships updated")


def delete_team(db: Session, actor: User, team_id: int) -> Team:
    """Soft delete; every active membership becomes INACTIVE."""
    authz.ensure_active(actor)
    team = load_active_team(db, team_id)
    authz.authorize(actor, Resource.TEAM, Action.DELETE, AccessFacts(membership=membership_of(db, team.id, actor.id)))
    _apply_status(db, actor, team, TeamStatus.DELETED)
    commit(db)
    logger.info(f"User {actor.id} deleted team {team.id}")
    return team


def restore_team(db: Session, actor: User, team_id: int) -> Team:
    """DELETED -> ACTIVE, administrators only."""
    authz.ensure_active(actor)
    team = team_crud.get_team(db, team_id)
    if team is None:
        raise TeamNotFound()
    authz.authorize(actor, Resource.TEAM, Action.ADMINISTER)
    if team.status == TeamStatus.ACTIVE:
        raise InvalidStateError("Team is already active", code="TEAM_ALREADY_ACTIVE")
    _apply_status(db, actor, team, TeamStatus.ACTIVE)
    commit(db, DuplicateTeamName())
    logger.info(f"User {actor.id} restored team {team.id}")
    return team
