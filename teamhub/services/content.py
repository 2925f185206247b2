"""Shared listing, statistics and author helpers for blogs and meetings"""

import math
import re
from datetime import timedelta
from typing import Optional, List

from teamhub.services.database import db, Q, utcnow

SORTABLE_FIELDS = {"date_published", "created_at", "updated_at", "title", "views"}
RECENT_DAYS = 7


def role_summary(role_id: Optional[str]) -> Optional[dict]:
    """Directory entry as embedded in blog and meeting responses"""
    if not role_id:
        return None
    role = db.get_by_id(db.roles, role_id)
    if not role:
        return {"id": role_id, "name": None, "email": None, "role": None, "batch": None}
    user = db.get_user_by_email(role["email"])
    return {
        "id": role["id"],
        "name": (user or {}).get("display_name") or role.get("name") or role["email"].split("@")[0],
        "email": role["email"],
        "role": role["role"],
        "batch": role.get("batch"),
    }


def missing_roles(role_ids: List[str]) -> List[str]:
    return [rid for rid in role_ids if not db.roles.contains(Q.id == rid)]


def list_published(
    table,
    search: str = "",
    filter: str = "all",
    author: str = "",
    sort_by: str = "date_published",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
):
    """Published documents matching the listing filters; returns (items, pagination)"""
    query = Q.is_published == True  # noqa: E712

    if search:
        pattern = re.escape(search.strip())
        query = query & (
            Q.title.search(pattern, flags=re.IGNORECASE)
            | Q.content.search(pattern, flags=re.IGNORECASE)
        )

    if filter == "recent":
        since = (utcnow() - timedelta(days=RECENT_DAYS)).isoformat()
        query = query & (Q.date_published >= since)

    if author:
        query = query & (Q.author == author)

    if sort_by not in SORTABLE_FIELDS:
        sort_by = "date_published"

    docs = table.search(query)
    docs.sort(
        key=lambda d: d.get(sort_by) if d.get(sort_by) is not None else "",
        reverse=(sort_order == "desc")
    )

    total = len(docs)
    start = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    pagination = {
        "current_page": page,
        "total_pages": total_pages,
        "total": total,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
        "limit": limit,
    }
    return [dict(d) for d in docs[start:start + limit]], pagination


def content_stats(table) -> dict:
    """Published count, this month's count, distinct authors and total views"""
    now = utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0).isoformat()

    published = table.search(Q.is_published == True)  # noqa: E712
    return {
        "total": len(published),
        "this_month": sum(1 for d in published if d.get("date_published", "") >= month_start),
        "authors_count": len({d.get("author") for d in table.all() if d.get("author")}),
        "total_views": sum(d.get("views", 0) for d in published),
    }


def list_authors() -> List[dict]:
    """Directory entries usable as authors, sorted by name"""
    authors = [role_summary(r["id"]) for r in db.roles.all()]
    return sorted(authors, key=lambda a: (a["name"] or "").lower())
