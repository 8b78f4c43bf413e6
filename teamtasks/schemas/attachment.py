#teamtasks/schemas/attachment.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from teamtasks.models.enums import AttachmentStatus

class AttachmentRead(BaseModel):
    """
    AttachmentRead: metadata only; bytes are served by the download endpoint.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    user_id: int = Field(..., description="Uploader")
    original_filename: str = Field(..., examples=["roadmap.pdf"])
    content_type: str = Field(..., examples=["application/pdf"])
    file_size: int = Field(..., description="Size in bytes")
    status: AttachmentStatus
    created_at: datetime
