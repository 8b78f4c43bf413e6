#teamtasks/schemas/task.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from teamtasks.models.enums import TaskPriority, TaskStatus
from teamtasks.schemas.fields import UTCDatetime

class TaskCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255, examples=["Write migration"])
    description: Optional[str] = Field(None, max_length=10000)
    project_id: int
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TO_DO
    assigned_to: Optional[int] = None
    due_date: Optional[UTCDatetime] = None

class TaskUpdate(BaseModel):
    """
    TaskUpdate: at least one field. DELETED is reached through delete only.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[UTCDatetime] = None

class TaskAssign(BaseModel):
    user_id: int

class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    project_id: int
    status: TaskStatus
    priority: TaskPriority
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
