"""Project aggregate: save rules, activity log, comments, health and statistics"""

import logging
import zlib
from datetime import datetime
from typing import Optional, List

from teamhub.services.access import build_project_query, overdue_query
from teamhub.services.database import db, Q, to_utc_naive, utcnow

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 50

STATUS_PROGRESS_FLOOR = {
    "To Do": 0,
    "In Progress": 25,
    "Review": 75,
    "Done": 100,
}

PRIORITY_RANK = {"Low": 0, "Medium": 1, "High": 2}

ASSIGNEE_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444",
    "#8b5cf6", "#ec4899", "#14b8a6", "#f97316",
]


class ProjectValidationError(ValueError):
    """A project document breaks one of its save rules"""


def iso(value) -> Optional[str]:
    """Store datetimes as naive UTC ISO strings"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc_naive(value).isoformat()
    return str(value)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return to_utc_naive(datetime.fromisoformat(value))


def user_label(user: dict) -> str:
    return user.get("display_name") or user.get("email", "").split("@")[0] or "Unknown"


def assignee_color(user_id: str) -> str:
    return ASSIGNEE_COLORS[zlib.crc32(user_id.encode()) % len(ASSIGNEE_COLORS)]


def build_assignees(user_ids: List[str]) -> List[dict]:
    """Snapshot the assigned users onto the project"""
    assignees = []
    seen = set()
    for user_id in user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        user = db.get_user_by_id(user_id)
        if not user:
            raise ProjectValidationError(f"Invalid assignee ID: {user_id}")
        assignees.append({
            "user_id": user["id"],
            "name": user_label(user),
            "email": user["email"],
            "avatar": user.get("photo_url"),
            "color": assignee_color(user["id"]),
        })
    return assignees


# =============================================================================
# Aggregate mutations
# =============================================================================

def add_activity(project: dict, activity_type: str, user: dict, description: str, metadata: dict = None) -> dict:
    """Prepend an activity entry, keeping only the newest ACTIVITY_LIMIT"""
    entry = {
        "id": db.generate_id(),
        "type": activity_type,
        "user": user["id"],
        "user_name": user_label(user),
        "description": description,
        "timestamp": db.timestamp(),
        "metadata": metadata or {},
    }
    activities = [entry] + list(project.get("activities", []))
    project["activities"] = activities[:ACTIVITY_LIMIT]
    return entry


def add_comment(project: dict, user: dict, message: str) -> dict:
    """Prepend a comment and log it; a logging failure never loses the comment"""
    comment = {
        "id": db.generate_id(),
        "user": user["id"],
        "user_name": user_label(user),
        "user_avatar": user.get("photo_url"),
        "message": message,
        "created_at": db.timestamp(),
    }
    project["comments"] = [comment] + list(project.get("comments", []))

    try:
        preview = message[:50] + ("..." if len(message) > 50 else "")
        add_activity(project, "comment", user, f"added a comment: {preview}", {"comment_id": comment["id"]})
    except Exception as e:
        logger.error(f"Failed to record comment activity on project {project.get('id')}: {e}", exc_info=True)

    return comment


def add_milestone(project: dict, user: dict, title: str, description: str = None, due_date=None) -> dict:
    milestone = {
        "id": db.generate_id(),
        "title": title,
        "description": description,
        "due_date": iso(due_date),
        "completed": False,
        "completed_at": None,
    }
    project.setdefault("milestones", []).append(milestone)
    add_activity(project, "milestone", user, f"added milestone: {title}", {"milestone_id": milestone["id"]})
    return milestone


def update_milestone(project: dict, user: dict, milestone_id: str, title: str = None, completed: bool = None) -> Optional[dict]:
    milestone = next((m for m in project.get("milestones", []) if m["id"] == milestone_id), None)
    if milestone is None:
        return None

    if title is not None:
        milestone["title"] = title

    if completed is not None and completed != milestone.get("completed", False):
        milestone["completed"] = completed
        milestone["completed_at"] = db.timestamp() if completed else None
        verb = "completed" if completed else "reopened"
        add_activity(project, "milestone", user, f"{verb} milestone: {milestone['title']}", {"milestone_id": milestone_id})

    return milestone


def change_status(project: dict, user: dict, new_status: str) -> bool:
    """Kanban move; returns False when the status is unchanged"""
    old_status = project.get("status")
    if old_status == new_status:
        return False
    project["status"] = new_status
    add_activity(
        project, "status_change", user,
        f"moved project from {old_status} to {new_status}",
        {"from": old_status, "to": new_status}
    )
    return True


# =============================================================================
# Save rules
# =============================================================================

def apply_save_rules(project: dict, previous: Optional[dict] = None) -> dict:
    """Validate and normalize a project before it is written.

    ``previous`` is the stored version, None for a new project.
    """
    start = parse_iso(project.get("start_date"))
    due = parse_iso(project.get("due_date"))
    if not start or not due:
        raise ProjectValidationError("Start date and due date are required")
    if due <= start:
        raise ProjectValidationError("Due date must be after start date")

    status = project.get("status")
    if status not in STATUS_PROGRESS_FLOOR:
        raise ProjectValidationError(f"Invalid status: {status}")

    # progress never sits below the status floor; Done is always 100 and
    # moving back to To Do starts over at 0
    progress = max(0, min(100, int(project.get("progress") or 0)))
    progress = max(progress, STATUS_PROGRESS_FLOOR[status])
    if status == "To Do" and previous is not None and previous.get("status") != status:
        progress = 0
    project["progress"] = progress

    was_archived = bool(previous and previous.get("is_archived"))
    if project.get("is_archived") and not was_archived:
        project["archived_at"] = db.timestamp()
    elif not project.get("is_archived"):
        project["archived_at"] = None

    project["activities"] = list(project.get("activities", []))[:ACTIVITY_LIMIT]
    project["updated_at"] = db.timestamp()
    return project


def save_project(project: dict, previous: Optional[dict] = None) -> dict:
    """Apply the save rules, then insert or replace the document"""
    apply_save_rules(project, previous)
    if previous is None:
        db.projects.insert(project)
    else:
        db.replace(db.projects, project)
    return project


def new_project(data, creator: dict) -> dict:
    """Build a project document from a ProjectCreate payload"""
    project = {
        "id": db.generate_id(),
        "title": data.title.strip(),
        "description": data.description,
        "status": data.status.value,
        "priority": data.priority.value,
        "assignees": build_assignees(data.assignee_ids),
        "start_date": iso(data.start_date),
        "due_date": iso(data.due_date),
        "progress": data.progress,
        "created_by": creator["id"],
        "created_by_name": user_label(creator),
        "milestones": [],
        "comments": [],
        "activities": [],
        "risks": [r.model_dump(mode="json") for r in data.risks],
        "tags": [t.strip() for t in data.tags if t.strip()],
        "is_archived": False,
        "archived_at": None,
        "created_at": db.timestamp(),
    }
    for m in data.milestones:
        project["milestones"].append({
            "id": db.generate_id(),
            "title": m.title,
            "description": m.description,
            "due_date": iso(m.due_date),
            "completed": False,
            "completed_at": None,
        })
    add_activity(project, "created", creator, f"created project {project['title']}")
    return project


# =============================================================================
# Derived views
# =============================================================================

def project_health(project: dict, now: Optional[datetime] = None) -> str:
    """completed, at_risk, needs_attention or on_track"""
    if project.get("status") == "Done":
        return "completed"

    now = now or utcnow()
    start = parse_iso(project.get("start_date"))
    due = parse_iso(project.get("due_date"))
    if due and due < now:
        return "at_risk"
    if not start or not due or due <= start:
        return "on_track"

    total = (due - start).total_seconds()
    elapsed = (now - start).total_seconds()
    expected = max(0.0, min(100.0, elapsed / total * 100))
    shortfall = expected - project.get("progress", 0)

    if shortfall <= 0:
        return "on_track"
    if shortfall <= 20:
        return "needs_attention"
    return "at_risk"


def empty_statistics() -> dict:
    return {
        "total": 0,
        "todo": 0,
        "in_progress": 0,
        "review": 0,
        "done": 0,
        "overdue": 0,
        "high_priority": 0,
    }


STATUS_STAT_KEYS = {
    "To Do": "todo",
    "In Progress": "in_progress",
    "Review": "review",
    "Done": "done",
}


def get_statistics(user_id: str, role: Optional[str], now: Optional[datetime] = None) -> dict:
    """Counts over the non-archived projects the caller can see"""
    stats = empty_statistics()
    scope = build_project_query(user_id, role)
    overdue = overdue_query(now)

    for project in db.projects.search(scope):
        stats["total"] += 1
        key = STATUS_STAT_KEYS.get(project.get("status"))
        if key:
            stats[key] += 1
        if overdue(project):
            stats["overdue"] += 1
        if project.get("priority") == "High":
            stats["high_priority"] += 1

    return stats


SORTABLE_FIELDS = {"created_at", "updated_at", "start_date", "due_date", "title", "status", "priority", "progress"}


def sort_projects(projects: List[dict], sort_by: str = "created_at", sort_order: str = "desc") -> List[dict]:
    if sort_by not in SORTABLE_FIELDS:
        sort_by = "created_at"

    def key(project):
        if sort_by == "priority":
            return PRIORITY_RANK.get(project.get("priority"), 0)
        value = project.get(sort_by)
        if isinstance(value, str):
            return value.lower() if sort_by == "title" else value
        return value if value is not None else ""

    return sorted(projects, key=key, reverse=(sort_order == "desc"))


def find_project(project_id: str) -> Optional[dict]:
    return db.get_by_id(db.projects, project_id)


def team_member_ids(user_id: str) -> set:
    """Users who share at least one project with ``user_id``"""
    ids = set()
    for project in db.projects.search(Q.is_archived == False):  # noqa: E712
        participants = {a["user_id"] for a in project.get("assignees", [])}
        participants.add(project.get("created_by"))
        if user_id in participants:
            ids |= participants
    ids.discard(None)
    return ids
