#teamtasks/crud/team.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamtasks.models.enums import MemberStatus, TeamRole, TeamStatus
from teamtasks.models.team import Team, TeamMember


def get_team(db: Session, team_id: int) -> Optional[Team]:
    return db.get(Team, team_id)


def get_team_by_name(db: Session, name: str) -> Optional[Team]:
    return db.query(Team).filter(func.lower(Team.name) == name.strip().lower()).first()


def team_name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Team.id).filter(func.lower(Team.name) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(Team.id != exclude_id)
    return db.query(query.exists()).scalar()


def list_teams(
    db: Session,
    owner_id: Optional[int] = None,
    status: Optional[TeamStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Team]:
    query = db.query(Team)
    if owner_id is not None:
        query = query.filter(Team.owner_id == owner_id)
    if status is not None:
        query = query.filter(Team.status == status)
    return query.order_by(Team.name).offset(skip).limit(limit).all()


def list_active_teams_for_user(db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[Team]:
    return (
        db.query(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .filter(
            TeamMember.user_id == user_id,
            TeamMember.status == MemberStatus.ACTIVE,
            Team.status == TeamStatus.ACTIVE,
        )
        .order_by(Team.name)
        .offset(skip)
        .limit(limit)
        .all()
    )

# ==== Memberships ====

def get_membership(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    return db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == user_id,
    ).first()


def list_members(
    db: Session,
    team_id: int,
    status: Optional[MemberStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[TeamMember]:
    query = db.query(TeamMember).filter(TeamMember.team_id == team_id)
    if status is not None:
        query = query.filter(TeamMember.status == status)
    return query.order_by(TeamMember.joined_at, TeamMember.id).offset(skip).limit(limit).all()


def count_members(db: Session, team_id: int, status: Optional[MemberStatus] = None) -> int:
    query = db.query(TeamMember).filter(TeamMember.team_id == team_id)
    if status is not None:
        query = query.filter(TeamMember.status == status)
    return query.count()


def count_owners(db: Session, team_id: int) -> int:
    return db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.role == TeamRole.OWNER,
        TeamMember.status == MemberStatus.ACTIVE,
    ).count()


def bulk_update_member_status(
    db: Session,
    team_id: int,
    from_status: MemberStatus,
    to_status: MemberStatus,
    actor_id: int,
    now: datetime,
) -> int:
    """Moves every membership of the team in `from_status` to `to_status`."""
    members = db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.status == from_status,
    ).all()
    for member in members:
        member.status = to_status
        member.stamp_updated(actor_id, now)
    return len(members)
