"""Top-level activity log shared by all resources"""

import logging
from datetime import datetime
from typing import Optional

from teamhub.services.database import db, utcnow

logger = logging.getLogger(__name__)

ACTIONS = {"created", "updated", "deleted", "completed", "assigned", "joined", "left", "archived", "commented"}
ENTITY_TYPES = {"project", "meeting", "blog", "attendance", "user"}


def record_activity(
    user_id: str,
    action: str,
    entity_type: str,
    entity_id: str,
    entity_title: str,
    description: str,
    metadata: dict = None
) -> Optional[dict]:
    """Log an activity. Failures are logged and swallowed so the caller's write stands."""
    try:
        if action not in ACTIONS:
            raise ValueError(f"Unknown activity action: {action}")
        if entity_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown activity entity type: {entity_type}")

        activity = {
            "id": db.generate_id(),
            "user_id": user_id,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "entity_title": (entity_title or "").strip(),
            "description": description.strip(),
            "metadata": metadata or {},
            "created_at": db.timestamp(),
        }
        db.activities.insert(activity)
        return activity
    except Exception as e:
        logger.error(f"Error creating activity: {e}", exc_info=True)
        return None


def time_ago(timestamp: str, now: Optional[datetime] = None) -> str:
    """Human readable age of an ISO timestamp"""
    created = datetime.fromisoformat(timestamp)
    now = now or utcnow()
    seconds = int((now - created).total_seconds())

    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    if seconds < 604800:
        return f"{seconds // 86400} days ago"
    return created.date().isoformat()


def describe(activity: dict) -> dict:
    """Activity as returned by the API, with the actor's name"""
    user = db.get_user_by_id(activity["user_id"]) if activity.get("user_id") else None
    return {
        **activity,
        "user": {
            "id": activity.get("user_id"),
            "name": (user or {}).get("display_name"),
            "email": (user or {}).get("email"),
        },
        "time_ago": time_ago(activity["created_at"]),
    }
