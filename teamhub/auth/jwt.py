"""JWT token handling"""

import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt

from teamhub.config import settings
from teamhub.services.database import utcnow

logger = logging.getLogger(__name__)

# JWT Configuration
ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=ALGORITHM
    )
    return encoded_jwt


def create_refresh_token(data: dict) -> str:
    """Create JWT refresh token, signed with the refresh secret"""
    to_encode = data.copy()
    expire = utcnow() + timedelta(days=settings.refresh_token_expire_days)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(
        to_encode,
        settings.jwt_refresh_secret,
        algorithm=ALGORITHM
    )


def verify_token(token: str) -> Optional[dict]:
    """Verify and decode JWT access token"""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type", "access") != "access":
        return None
    return payload


def verify_refresh_token(token: str) -> Optional[dict]:
    """Verify a refresh token"""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_refresh_secret,
            algorithms=[ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"Refresh token verification failed: {e}")
        return None

    if payload.get("type") != "refresh":
        return None
    return payload


def issue_tokens(user: dict) -> dict:
    """Access and refresh token pair for a user record"""
    claims = {"sub": user["id"], "email": user["email"]}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }
