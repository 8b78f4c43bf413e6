#teamtasks/schemas/response.py
from pydantic import BaseModel, Field
from typing import Any, Optional

class ErrorDetail(BaseModel):
    """
    ErrorDetail: machine-readable code plus a human-readable message.
    """
    code: str = Field(..., examples=["ACCESS_DENIED"], description="Stable error code")
    message: str = Field(..., examples=["Only the team owner can manage team members"])
    details: Optional[Any] = Field(None, description="Extra diagnostics")

class ErrorResponse(BaseModel):
    """
    ErrorResponse: body of every failed request.
    """
    error: ErrorDetail

class SimpleMessage(BaseModel):
    message: str = Field(..., examples=["Action completed successfully"])

class CountResponse(BaseModel):
    count: int
