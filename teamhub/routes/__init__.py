"""API Routes"""

from teamhub.routes import (
    auth,
    projects,
    activities,
    students,
    attendance,
    blogs,
    meetings,
    papers,
    event_reports,
)

__all__ = [
    "auth",
    "projects",
    "activities",
    "students",
    "attendance",
    "blogs",
    "meetings",
    "papers",
    "event_reports",
]
