"""Role Directory member models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class DirectoryRole(str, Enum):
    ADMIN = "Admin"
    MEMBER = "Member"
    SPOC = "SPOC"


class MemberCreate(BaseModel):
    """Request model for adding someone to the Role Directory"""
    email: EmailStr
    role: DirectoryRole = DirectoryRole.MEMBER
    batch: Optional[int] = Field(None, ge=1990, le=2100)
    name: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RoleUpdate(BaseModel):
    role: DirectoryRole
