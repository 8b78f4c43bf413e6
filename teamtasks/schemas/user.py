#teamtasks/schemas/user.py
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional
from datetime import datetime

from teamtasks.models.enums import UserRole, UserStatus
from teamtasks.schemas.fields import StrongPassword

class UserBase(BaseModel):
    """
    Public user fields shared by create and read schemas.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., examples=["jane.doe@example.com"], description="Email, unique regardless of case")
    first_name: str = Field(..., min_length=1, max_length=100, examples=["Jane"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Doe"])

class UserCreate(UserBase):
    """
    UserCreate: account created by an administrator.
    """
    password: StrongPassword = Field(..., examples=["Secure123!Pass"])
    role: UserRole = Field(UserRole.MEMBER, description="System role")

class UserUpdate(BaseModel):
    """
    UserUpdate: every field is optional. role, status and email_verified are admin-only.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[EmailStr] = None
    password: Optional[StrongPassword] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=512)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    email_verified: Optional[bool] = None

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    email_verified: bool
    avatar_url: Optional[str] = Field(None, examples=["https://cdn.example.com/avatars/jane.jpg"])
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
