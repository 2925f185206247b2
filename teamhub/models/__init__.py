"""Models package - Pydantic models for API requests"""

from teamhub.models.project import (
    ProjectStatus,
    ProjectPriority,
    ProjectCreate,
    ProjectUpdate,
    ProjectStatusUpdate,
    ProjectFilters,
    CommentCreate,
    MilestoneCreate,
    MilestoneUpdate,
)
from teamhub.models.user import (
    LoginRequest,
    RegisterRequest,
    OAuthLoginRequest,
    CheckEmailRequest,
    RefreshTokenRequest,
)
from teamhub.models.member import DirectoryRole, MemberCreate, RoleUpdate
from teamhub.models.attendance import AttendanceStatus, TaskStatus, AttendanceMark, AttendanceBulk
from teamhub.models.content import (
    LinkItem,
    BlogCreate,
    BlogUpdate,
    MeetingForm,
    PaperForm,
    EventReportForm,
)

__all__ = [
    # Project
    "ProjectStatus",
    "ProjectPriority",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectStatusUpdate",
    "ProjectFilters",
    "CommentCreate",
    "MilestoneCreate",
    "MilestoneUpdate",
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "OAuthLoginRequest",
    "CheckEmailRequest",
    "RefreshTokenRequest",
    # Directory
    "DirectoryRole",
    "MemberCreate",
    "RoleUpdate",
    # Attendance
    "AttendanceStatus",
    "TaskStatus",
    "AttendanceMark",
    "AttendanceBulk",
    # Content
    "LinkItem",
    "BlogCreate",
    "BlogUpdate",
    "MeetingForm",
    "PaperForm",
    "EventReportForm",
]
