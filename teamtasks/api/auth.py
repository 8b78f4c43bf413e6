#teamtasks/api/auth.py
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from typing import List
import logging

from teamtasks.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RegisterRequest,
    SessionRead,
    TokenCleanupResult,
    TokenPair,
    TokenRefreshRequest,
)
from teamtasks.schemas.user import UserRead
from teamtasks.schemas.response import CountResponse, SimpleMessage
from teamtasks.services import auth_service, token_service
from teamtasks.services.auth_service import AuthSession
from teamtasks.dependencies import get_db, get_current_user
from teamtasks.models.user import User

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("TaskHub.AuthAPI")


def _auth_response(session: AuthSession) -> AuthResponse:
    return AuthResponse(
        access_token=session.access_token,
        token_type="bearer",
        expires_in=token_service.access_token_lifetime_seconds(),
        refresh_token=session.refresh_token,
        user=UserRead.model_validate(session.user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new account; the response already carries a session.
    """
    return _auth_response(auth_service.register(db, data))


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return _auth_response(auth_service.login(db, data.email, data.password))


@router.post("/token", response_model=TokenPair, include_in_schema=False)
def login_form(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    OAuth2 password form login (used by the interactive docs); `username` is the email.
    """
    session = auth_service.login(db, form_data.username, form_data.password)
    return TokenPair(
        access_token=session.access_token,
        token_type="bearer",
        expires_in=token_service.access_token_lifetime_seconds(),
        refresh_token=session.refresh_token,
    )


@router.post("/refresh", response_model=AuthResponse)
def refresh_token(data: TokenRefreshRequest, db: Session = Depends(get_db)):
    """
    Rotate the refresh token: the presented one is revoked, a new pair is returned.
    """
    return _auth_response(auth_service.refresh(db, data.refresh_token))


@router.post("/logout", response_model=SimpleMessage)
def logout(data: LogoutRequest, db: Session = Depends(get_db)):
    auth_service.logout(db, data.refresh_token)
    return SimpleMessage(message="Logged out")


@router.post("/logout-all", response_model=CountResponse)
def logout_all(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """
    Revoke every refresh token of the current user.
    """
    return CountResponse(count=auth_service.logout_all(db, user))


@router.get("/me", response_model=UserRead)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/sessions", response_model=List[SessionRead])
def list_sessions(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return auth_service.list_sessions(db, user)


@router.post("/cleanup", response_model=TokenCleanupResult)
def cleanup_tokens(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """
    Delete expired and revoked refresh tokens (administrators).
    """
    expired, revoked = auth_service.cleanup_tokens(db, user)
    return TokenCleanupResult(expired_deleted=expired, revoked_deleted=revoked)
