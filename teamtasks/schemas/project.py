#teamtasks/schemas/project.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from teamtasks.models.enums import ProjectStatus
from teamtasks.schemas.fields import UTCDatetime

class ProjectCreate(BaseModel):
    """
    ProjectCreate: status defaults to PLANNED; only PLANNED, ACTIVE or ON_HOLD are accepted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=128, examples=["Billing revamp"])
    description: Optional[str] = Field(None, max_length=5000)
    team_id: int
    status: Optional[ProjectStatus] = None
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None

class ProjectUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=5000)
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    status: Optional[ProjectStatus] = None

class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus

class ProjectTransfer(BaseModel):
    team_id: int = Field(..., description="Destination team")

class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    team_id: int
    status: ProjectStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
