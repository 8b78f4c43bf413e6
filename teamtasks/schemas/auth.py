#teamtasks/schemas/auth.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

from teamtasks.schemas.fields import StrongPassword
from teamtasks.schemas.user import UserRead

class RegisterRequest(BaseModel):
    """
    RegisterRequest: self-service sign-up.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., examples=["a@x.com"])
    password: StrongPassword = Field(..., examples=["Secure123!Pass"])
    first_name: str = Field(..., min_length=1, max_length=100, examples=["Ann"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Lee"])

class LoginRequest(BaseModel):
    email: EmailStr = Field(..., examples=["a@x.com"])
    password: str = Field(..., min_length=1, examples=["Secure123!Pass"])

class TokenRefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Opaque refresh token")

class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, description="Refresh token to revoke; blank is a no-op")

class TokenPair(BaseModel):
    """
    TokenPair: access token plus the rotated refresh token.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", examples=["bearer"])
    expires_in: int = Field(..., description="Access token lifetime, seconds", examples=[900])
    refresh_token: str = Field(..., description="Opaque refresh token")

class AuthResponse(TokenPair):
    """
    AuthResponse: answer to register and login.
    """
    user: UserRead

class SessionRead(BaseModel):
    """A live refresh token, without the token string."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    expires_at: datetime

class TokenCleanupResult(BaseModel):
    expired_deleted: int
    revoked_deleted: int
