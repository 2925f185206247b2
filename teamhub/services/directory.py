"""Role Directory: the email allowlist that also carries each member's role"""

import logging
from datetime import datetime
from typing import Optional, List

from teamhub.services.database import db, Q, normalize_email, utcnow

logger = logging.getLogger(__name__)

DIRECTORY_ROLES = ("Admin", "Member", "SPOC")


def ordinal_suffix(num: int) -> str:
    if num % 10 == 1 and num % 100 != 11:
        return "st"
    if num % 10 == 2 and num % 100 != 12:
        return "nd"
    if num % 10 == 3 and num % 100 != 13:
        return "rd"
    return "th"


def year_label(batch: Optional[int], today: Optional[datetime] = None) -> str:
    """Academic year of a batch: "1st Year".."4th Year", "Alumni" or "Not Started" """
    if batch is None:
        return "Not Started"
    year = (today or utcnow()).year - int(batch) + 1
    if 0 < year <= 4:
        return f"{year}{ordinal_suffix(year)} Year"
    if year > 4:
        return "Alumni"
    return "Not Started"


def resolve_role(email: str, fallback: str = "Member") -> str:
    """Current directory role for an email"""
    role = db.get_role_by_email(email)
    return role["role"] if role else fallback


def member_view(role: dict) -> dict:
    user = db.get_user_by_email(role["email"])
    return {
        "id": role["id"],
        "email": role["email"],
        "name": (user or {}).get("display_name") or role.get("name") or role["email"].split("@")[0],
        "role": role["role"],
        "batch": role.get("batch"),
        "year": year_label(role.get("batch")),
        "assigned_by": role.get("assigned_by"),
        "assigned_at": role.get("assigned_at"),
    }


def list_members() -> List[dict]:
    roles = sorted(db.roles.all(), key=lambda r: r.get("assigned_at", ""), reverse=True)
    return [member_view(r) for r in roles]


def seed_roles(entries: List[dict], assigned_by: str = "system") -> int:
    """Insert Role Directory entries whose email is not present yet"""
    created = 0
    for entry in entries:
        if db.get_role_by_email(entry["email"]):
            logger.info(f"Role exists, skipping: {entry['email']}")
            continue
        db.create_role({
            "email": entry["email"],
            "role": entry.get("role", "Member"),
            "batch": entry.get("batch"),
            "assigned_by": assigned_by,
        })
        created += 1
    return created


def normalize_role_emails() -> int:
    """Lower-case and trim every stored Role email; returns how many changed"""
    changed = 0
    for role in db.roles.all():
        normalized = normalize_email(role["email"])
        if normalized != role["email"]:
            logger.info(f"Normalizing email: {role['email']} -> {normalized}")
            db.roles.update({"email": normalized}, Q.id == role["id"])
            changed += 1
    return changed
