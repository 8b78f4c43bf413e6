#teamtasks/api/team.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from teamtasks.schemas.team import (
    MemberAdd,
    MemberCount,
    MemberRoleUpdate,
    TeamCreate,
    TeamMemberRead,
    TeamRead,
    TeamUpdate,
)
from teamtasks.schemas.project import ProjectRead
from teamtasks.services import project_service, team_member_service, team_service
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User as UserModel

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.post("/", response_model=TeamRead, status_code=status.HTTP_201_CREATED)
def create_team_api(
    data: TeamCreate,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    """
    Create a team; the current user becomes its owner.
    """
    return team_service.create_team(db, user, data)


@router.get("/", response_model=List[TeamRead])
def list_my_teams(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    """
    Active teams where the current user is an active member.
    """
    return team_service.list_my_teams(db, user, skip, limit)


@router.get("/all", response_model=List[TeamRead])
def list_all_teams(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_service.list_all_teams(db, user, skip, limit)


@router.get("/by-name/{name}", response_model=TeamRead)
def read_team_by_name(name: str, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_service.get_team_by_name(db, user, name)


@router.get("/owner/{owner_id}", response_model=List[TeamRead])
def list_teams_by_owner(
    owner_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_service.list_teams_by_owner(db, user, owner_id, skip, limit)


@router.get("/{team_id}", response_model=TeamRead)
def read_team(team_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_service.get_team(db, user, team_id)


@router.patch("/{team_id}", response_model=TeamRead)
def update_team_api(
    team_id: int,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_service.update_team(db, user, team_id, data)


@router.delete("/{team_id}", response_model=TeamRead)
def delete_team_api(team_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    """
    Soft delete a team; active memberships become inactive.
    """
    return team_service.delete_team(db, user, team_id)


@router.post("/{team_id}/restore", response_model=TeamRead)
def restore_team_api(team_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_service.restore_team(db, user, team_id)


@router.get("/{team_id}/projects", response_model=List[ProjectRead])
def list_team_projects(
    team_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return project_service.list_projects_by_team(db, user, team_id, skip, limit)

# --- Members ---

@router.get("/{team_id}/members", response_model=List[TeamMemberRead])
def list_members(
    team_id: int,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_member_service.list_members(db, user, team_id, skip, limit)


@router.get("/{team_id}/members/count", response_model=MemberCount)
def count_members(team_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    total, active = team_member_service.count_members(db, user, team_id)
    return MemberCount(team_id=team_id, total=total, active=active)


@router.post("/{team_id}/members", response_model=TeamMemberRead, status_code=status.HTTP_201_CREATED)
def add_member(
    team_id: int,
    data: MemberAdd,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_member_service.add_member(db, user, team_id, data.user_id, data.role)


@router.post("/{team_id}/leave", response_model=TeamMemberRead)
def leave_team(team_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_member_service.leave_team(db, user, team_id)


@router.get("/{team_id}/members/{user_id}", response_model=TeamMemberRead)
def get_member(team_id: int, user_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_member_service.get_member(db, user, team_id, user_id)


@router.patch("/{team_id}/members/{user_id}", response_model=TeamMemberRead)
def update_member_role(
    team_id: int,
    user_id: int,
    data: MemberRoleUpdate,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return team_member_service.update_member_role(db, user, team_id, user_id, data.role)


@router.delete("/{team_id}/members/{user_id}", response_model=TeamMemberRead)
def remove_member(team_id: int, user_id: int, db: Session = Depends(get_db), user: UserModel = Depends(get_current_user)):
    return team_member_service.remove_member(db, user, team_id, user_id)
