"""Member directory routes backed by the Role Directory"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from teamhub.auth.unified import AuthContext, get_auth_context, require_admin
from teamhub.models.member import MemberCreate, RoleUpdate
from teamhub.responses import success
from teamhub.services.activity import record_activity
from teamhub.services.database import db, Q, normalize_email
from teamhub.services.directory import list_members, member_view

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def list_students(auth: AuthContext = Depends(get_auth_context)):
    """All directory members, newest first"""
    members = list_members()
    return success(data=members, count=len(members))


@router.get("/{member_id}")
async def get_student(member_id: str, auth: AuthContext = Depends(get_auth_context)):
    role = db.get_by_id(db.roles, member_id)
    if not role:
        raise HTTPException(status_code=404, detail="Member not found")
    return success(data=member_view(role))


@router.post("")
async def add_student(data: MemberCreate, auth: AuthContext = Depends(require_admin)):
    """Add a member to the Role Directory and create their user record (Admin only)"""
    if db.get_role_by_email(data.email):
        raise HTTPException(status_code=400, detail="Member already exists")
    if db.get_user_by_email(data.email):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = db.create_user({
        "email": data.email,
        "display_name": data.name or data.email.split("@")[0],
        "photo_url": None,
        "auth_provider": None,
        "role": data.role.value,
    })
    role = db.create_role({
        "email": data.email,
        "name": data.name,
        "role": data.role.value,
        "batch": data.batch,
        "assigned_by": auth.user["email"],
    })

    record_activity(
        auth.user_id, "created", "user", user["id"], user["display_name"],
        f"Added {data.email} to the directory as {data.role.value}"
    )
    return success("Member added successfully", member_view(role), status_code=201)


@router.put("/{email}/role")
async def update_student_role(email: str, data: RoleUpdate, auth: AuthContext = Depends(require_admin)):
    """Change a member's directory role (Admin only)"""
    email = normalize_email(email)
    role = db.get_role_by_email(email)
    if not role:
        raise HTTPException(status_code=404, detail="Member not found")

    db.roles.update({"role": data.role.value}, Q.email == email)
    user = db.get_user_by_email(email)
    if user:
        db.update_user(user["id"], {"role": data.role.value})

    logger.info(f"Role for {email} changed from {role['role']} to {data.role.value} by {auth.user['email']}")
    return success("Member role updated successfully", member_view(db.get_role_by_email(email)))


@router.delete("/{email}")
async def remove_student(email: str, auth: AuthContext = Depends(require_admin)):
    """Remove a member from the directory and delete their user record (Admin only)"""
    email = normalize_email(email)
    removed_roles = db.roles.remove(Q.email == email)
    removed_users = db.users.remove(Q.email == email)
    if not removed_roles and not removed_users:
        raise HTTPException(status_code=404, detail="Member not found")

    logger.info(f"Member removed: {email} by {auth.user['email']}")
    return success("Member removed successfully")
