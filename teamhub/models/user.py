"""Authentication request models"""

from typing import Optional, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator


def _normalize(v: str) -> str:
    return v.strip().lower()


class LoginRequest(BaseModel):
    """Email and password login"""
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize(v)


class RegisterRequest(BaseModel):
    """Password account for an allowlisted email"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize(v)


class OAuthLoginRequest(BaseModel):
    """Profile handed over by the client after an identity provider sign-in"""
    uid: str = Field(..., min_length=1)
    email: EmailStr
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    email_verified: bool = False
    phone_number: Optional[str] = None
    auth_provider: Literal["google", "facebook", "github"] = "google"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize(v)


class CheckEmailRequest(BaseModel):
    email: EmailStr


class RefreshTokenRequest(BaseModel):
    refresh_token: str
