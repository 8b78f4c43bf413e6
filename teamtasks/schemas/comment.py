#teamtasks/schemas/comment.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from teamtasks.models.enums import CommentStatus

class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    task_id: int
    content: str = Field(..., min_length=1, max_length=5000)

class CommentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=5000)

class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    user_id: int
    content: str
    status: CommentStatus
    created_at: datetime
    updated_at: datetime
