#teamtasks/schemas/team.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from teamtasks.models.enums import MemberStatus, TeamRole, TeamStatus

class TeamCreate(BaseModel):
    """
    TeamCreate: the creator becomes the owner.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=128, examples=["Platform"])
    description: Optional[str] = Field(None, max_length=2000, examples=["Core platform team"])

class TeamUpdate(BaseModel):
    """
    TeamUpdate: all fields optional, at least one required. Status is owner-only.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[TeamStatus] = None

class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    owner_id: int
    status: TeamStatus
    created_at: datetime
    updated_at: datetime

class MemberAdd(BaseModel):
    user_id: int = Field(..., description="User to add")
    role: TeamRole = Field(TeamRole.MEMBER, description="OWNER cannot be granted this way")

class MemberRoleUpdate(BaseModel):
    role: TeamRole

class TeamMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    user_id: int
    role: TeamRole
    status: MemberStatus
    joined_at: datetime

class MemberCount(BaseModel):
    team_id: int
    total: int
    active: int
