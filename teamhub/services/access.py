"""
Project access control

Access levels are derived per request from the caller's global role and
their relation to the project; nothing here is persisted.
"""
import re
from datetime import datetime
from enum import Enum
from typing import Optional

from tinydb.queries import QueryInstance

from teamhub.services.database import Q, utcnow


class AccessLevel(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"
    NONE = "none"


# Role Directory values mapped onto the two privileged tiers
ADMIN_ROLES = {"admin"}
MODERATOR_ROLES = {"moderator", "spoc", "manager"}


def role_tier(global_role: Optional[str]) -> str:
    """Collapse a directory role into admin / moderator / member"""
    role = (global_role or "").strip().lower()
    if role in ADMIN_ROLES:
        return "admin"
    if role in MODERATOR_ROLES:
        return "moderator"
    return "member"


def is_admin(global_role: Optional[str]) -> bool:
    return role_tier(global_role) == "admin"


def can_manage_projects(global_role: Optional[str]) -> bool:
    """Create projects and see the whole team directory"""
    return role_tier(global_role) in ("admin", "moderator")


def is_participant(user_id: str, project: dict) -> bool:
    if project.get("created_by") == user_id:
        return True
    return any(a.get("user_id") == user_id for a in project.get("assignees", []))


def evaluate_access(user_id: str, global_role: Optional[str], project: dict) -> AccessLevel:
    tier = role_tier(global_role)
    if tier == "admin":
        return AccessLevel.ADMIN
    if tier == "moderator":
        return AccessLevel.MODERATOR
    if is_participant(user_id, project):
        return AccessLevel.MEMBER
    return AccessLevel.NONE


def can_edit(level: AccessLevel) -> bool:
    return level in (AccessLevel.ADMIN, AccessLevel.MODERATOR)


def can_view(level: AccessLevel) -> bool:
    return level != AccessLevel.NONE


def participant_query(user_id: str) -> QueryInstance:
    return (Q.created_by == user_id) | Q.assignees.any(Q.user_id == user_id)


def overdue_query(now: Optional[datetime] = None) -> QueryInstance:
    now_iso = (now or utcnow()).isoformat()
    return (Q.status != "Done") & (Q.due_date < now_iso)


def build_project_query(
    user_id: str,
    global_role: Optional[str],
    filters=None,
    now: Optional[datetime] = None
) -> QueryInstance:
    """Build the TinyDB query for the projects a caller may list.

    ``filters`` is a ``ProjectFilters`` (or anything with the same
    attributes). Caller filters are always intersected with the access
    scope, never widened by it.
    """
    include_archived = bool(filters and getattr(filters, "include_archived", False))

    query = Q.noop() if include_archived else (Q.is_archived == False)  # noqa: E712

    if not is_admin(global_role):
        query = query & participant_query(user_id)

    if filters is None:
        return query

    if filters.status:
        if filters.status.lower() == "overdue":
            query = query & overdue_query(now)
        else:
            query = query & (Q.status == filters.status)

    if filters.priority:
        query = query & (Q.priority == filters.priority)

    if filters.assignee:
        query = query & Q.assignees.any(Q.user_id == filters.assignee)

    if filters.search:
        pattern = re.escape(filters.search.strip())
        query = query & (
            Q.title.search(pattern, flags=re.IGNORECASE)
            | Q.description.search(pattern, flags=re.IGNORECASE)
        )

    return query
