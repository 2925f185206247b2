"""Unified authentication - supports both Firebase ID tokens and application JWTs"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from teamhub.auth.firebase import firebase_auth
from teamhub.auth.jwt import verify_token
from teamhub.services.access import role_tier
from teamhub.services.database import db
from teamhub.services.directory import resolve_role

logger = logging.getLogger(__name__)

# Security scheme - optional so a missing header yields our own 401 body
security = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    """Authenticated caller for one request"""
    user: dict                          # Full user dict from database
    role: str                           # Role Directory role, resolved per request
    auth_type: str                      # "firebase" or "jwt"

    @property
    def user_id(self) -> str:
        return self.user["id"]

    @property
    def tier(self) -> str:
        return role_tier(self.role)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_firebase(claims: dict) -> dict:
    """Find the user behind a verified Firebase token, creating it for allowlisted emails"""
    user = db.get_user_by_email(claims["email"])
    if user:
        return user

    if not db.get_role_by_email(claims["email"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Email not authorized for this portal."
        )

    logger.info(f"Creating user from Firebase token: {claims['email']}")
    return db.create_user({
        "uid": claims["sub"],
        "email": claims["email"],
        "display_name": claims.get("name") or claims["email"].split("@")[0],
        "photo_url": claims.get("picture"),
        "email_verified": bool(claims.get("email_verified")),
        "auth_provider": "google",
        "role": resolve_role(claims["email"]),
        "last_login_at": db.timestamp(),
    })


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthContext:
    """
    Resolve the bearer token to a user and their current role.

    Firebase ID tokens are tried first when Firebase is configured, then the
    token is treated as an application JWT.
    """
    if not credentials:
        raise _unauthorized("Access token is required")

    token = credentials.credentials
    user = None
    auth_type = "jwt"

    if firebase_auth.enabled:
        claims = await firebase_auth.verify_id_token(token)
        if claims:
            user = _user_from_firebase(claims)
            auth_type = "firebase"
        else:
            logger.debug("Firebase token verification failed, trying JWT")

    if user is None:
        payload = verify_token(token)
        if not payload:
            raise _unauthorized("Invalid or expired token")

        user_id = payload.get("sub")
        if not user_id:
            raise _unauthorized("Invalid token payload")

        user = db.get_user_by_id(user_id)
        if not user:
            raise _unauthorized("Invalid token - user not found")

    if not user.get("is_active", True):
        raise _unauthorized("Account is inactive")

    role = resolve_role(user["email"])
    logger.debug(f"{auth_type} auth: {user['email']} ({role})")

    return AuthContext(user=user, role=role, auth_type=auth_type)


def require_tier(*tiers: str):
    """
    Dependency factory that requires the caller's role tier to be one of ``tiers``
    ("admin", "moderator", "member").
    """
    async def check_tier(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if auth.tier not in tiers:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action"
            )
        return auth
    return check_tier


require_admin = require_tier("admin")
require_moderator = require_tier("admin", "moderator")
