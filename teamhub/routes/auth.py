"""Authentication routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from teamhub.auth.jwt import create_access_token, issue_tokens, verify_refresh_token
from teamhub.auth.passwords import hash_password, verify_password
from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.config import settings
from teamhub.models.user import (
    LoginRequest,
    RegisterRequest,
    OAuthLoginRequest,
    CheckEmailRequest,
    RefreshTokenRequest,
)
from teamhub.responses import success
from teamhub.services.database import db, normalize_email
from teamhub.services.directory import resolve_role

logger = logging.getLogger(__name__)
router = APIRouter()

PUBLIC_USER_FIELDS = (
    "id", "uid", "email", "display_name", "photo_url", "email_verified",
    "phone_number", "auth_provider", "role", "is_active", "created_at", "last_login_at",
)


def public_user(user: dict) -> dict:
    """User record without the password hash"""
    return {field: user.get(field) for field in PUBLIC_USER_FIELDS}


def _session(user: dict, message: str, status_code: int = 200):
    return success(message, {"user": public_user(user), **issue_tokens(user)}, status_code=status_code)


@router.post("/login")
async def login(data: LoginRequest):
    """Email and password login"""
    user = db.get_user_by_email(data.email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("password"):
        provider = (user.get("auth_provider") or "oauth").capitalize()
        raise HTTPException(
            status_code=400,
            detail=f"This email is associated with {provider} sign-in. Please use {provider} to login."
        )

    if not verify_password(data.password, user["password"]):
        logger.warning(f"Failed login for {data.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Account is inactive")

    user = db.update_user(user["id"], {
        "role": resolve_role(user["email"]),
        "last_login_at": db.timestamp(),
    })

    logger.info(f"Login success for user {user['id']}")
    return _session(user, "Login successful")


@router.post("/register")
async def register(data: RegisterRequest):
    """Create a password account for an allowlisted email"""
    role = db.get_role_by_email(data.email)
    if not role:
        raise HTTPException(status_code=403, detail="Access denied. Email not authorized for this portal.")

    if db.get_user_by_email(data.email):
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    user = db.create_user({
        "email": data.email,
        "password": hash_password(data.password),
        "display_name": data.display_name.strip(),
        "photo_url": None,
        "email_verified": False,
        "auth_provider": "local",
        "role": role["role"],
        "last_login_at": db.timestamp(),
    })

    return _session(user, "Registration successful", status_code=201)


@router.post("/oauth")
async def oauth_login(data: OAuthLoginRequest):
    """
    Identity provider sign-in.

    The Role Directory is the allowlist: an email without a Role record is
    rejected whether or not a User record already exists.
    """
    email = normalize_email(data.email)

    try:
        role = db.get_role_by_email(email)
    except Exception as e:
        logger.error(f"Role lookup failed for {email}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not role:
        logger.warning(f"OAuth login denied, email not in Role Directory: {email}")
        detail = {"message": "Access denied. Email not authorized for this portal."}
        if settings.auth_debug_diagnostics:
            detail["debug"] = {
                "searched_email": email,
                "available_emails": db.all_role_emails(),
            }
        raise HTTPException(status_code=403, detail=detail)

    try:
        user = db.get_user_by_email(email)
        if user:
            if not user.get("is_active", True):
                raise HTTPException(status_code=401, detail="Account is inactive")
            user = db.update_user(user["id"], {
                "uid": data.uid,
                "display_name": data.display_name or user.get("display_name"),
                "photo_url": data.photo_url or user.get("photo_url"),
                "email_verified": data.email_verified,
                "phone_number": data.phone_number or user.get("phone_number"),
                "auth_provider": data.auth_provider,
                "role": role["role"],
                "last_login_at": db.timestamp(),
            })
        else:
            user = db.create_user({
                "uid": data.uid,
                "email": email,
                "display_name": data.display_name or email.split("@")[0],
                "photo_url": data.photo_url,
                "email_verified": data.email_verified,
                "phone_number": data.phone_number,
                "auth_provider": data.auth_provider,
                "role": role["role"],
                "last_login_at": db.timestamp(),
            })
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"OAuth user upsert failed for {email}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"OAuth login success for user {user['id']} ({role['role']})")
    return _session(user, "OAuth login successful")


@router.post("/check-email")
async def check_email(data: CheckEmailRequest):
    """Whether an email is on the allowlist"""
    role = db.get_role_by_email(data.email)
    if role:
        return success(data={"authorized": True, "role": role["role"]})
    return success(data={"authorized": False})


@router.get("/profile")
async def get_profile(auth: AuthContext = Depends(get_auth_context)):
    """Get current user profile"""
    return success(data={**public_user(auth.user), "role": auth.role})


@router.post("/refresh-token")
async def refresh_token(data: RefreshTokenRequest):
    """New access token from a refresh token"""
    payload = verify_refresh_token(data.refresh_token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.get_user_by_id(payload.get("sub"))
    if not user or not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    access_token = create_access_token({"sub": user["id"], "email": user["email"]})
    return success(data={"access_token": access_token, "token_type": "bearer"})


@router.get("/users")
async def list_users(auth: AuthContext = Depends(get_auth_context)):
    """User directory for attendance and assignment pickers"""
    users = sorted(db.users.all(), key=lambda u: (u.get("display_name") or "").lower())
    return success(data=[
        {
            "id": u["id"],
            "email": u["email"],
            "display_name": u.get("display_name"),
            "photo_url": u.get("photo_url"),
            "role": resolve_role(u["email"]),
        }
        for u in users
    ])


@router.post("/logout")
async def logout():
    """
    Logout user.

    Tokens are stateless; the client discards them.
    """
    return success("Logged out successfully")
