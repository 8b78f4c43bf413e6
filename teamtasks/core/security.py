# teamtasks/core/security.py

import secrets
from datetime import datetime, timedelta
from typing import Optional, Any, Dict
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import OAuth2PasswordBearer

from teamtasks.core import clock
from teamtasks.core.exceptions import TokenExpiredError, TokenInvalidError
from teamtasks.core.settings import settings

logger = logging.getLogger("TaskHub.Security")

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Checks a password against its hash. Unknown or malformed hashes count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Password hash could not be identified")
        return False


def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> tuple[str, datetime]:
    """
    Signs a short-lived access token for `subject` (the user's email).
    Returns (token, expire_time).
    """
    now = clock.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": subject,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt, expire


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Validates signature, expiry and token type. Expiry is checked against the
    application clock, so tests can move time forward.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise TokenInvalidError()
    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise TokenInvalidError()
    exp = payload.get("exp")
    if not isinstance(exp, (int, float)) or clock.utcnow().timestamp() >= exp:
        raise TokenExpiredError()
    return payload


def generate_refresh_token() -> str:
    """Unpredictable opaque refresh token string."""
    return secrets.token_urlsafe(48)


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")
