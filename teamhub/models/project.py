"""Project models"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from teamhub.services.database import to_utc_naive


class ProjectStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    DONE = "Done"


class ProjectPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskItem(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    severity: ProjectPriority = ProjectPriority.MEDIUM
    mitigation: Optional[str] = Field(None, max_length=500)


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[datetime] = None


class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    completed: Optional[bool] = None


def _check_dates(start_date: Optional[datetime], due_date: Optional[datetime]):
    if start_date and due_date and to_utc_naive(due_date) <= to_utc_naive(start_date):
        raise ValueError("Due date must be after start date")


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: ProjectStatus = ProjectStatus.TODO
    priority: ProjectPriority = ProjectPriority.MEDIUM
    assignee_ids: List[str] = []
    start_date: datetime
    due_date: datetime
    progress: int = Field(0, ge=0, le=100)
    milestones: List[MilestoneCreate] = []
    risks: List[RiskItem] = []
    tags: List[str] = []

    @model_validator(mode="after")
    def due_after_start(self):
        _check_dates(self.start_date, self.due_date)
        return self


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    assignee_ids: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    risks: Optional[List[RiskItem]] = None
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def due_after_start(self):
        _check_dates(self.start_date, self.due_date)
        return self


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class CommentCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ProjectFilters(BaseModel):
    status: Optional[str] = None  # a ProjectStatus value or "overdue"
    priority: Optional[ProjectPriority] = None
    assignee: Optional[str] = None
    search: Optional[str] = None
    include_archived: bool = False
