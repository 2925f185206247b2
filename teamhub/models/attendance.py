"""Attendance models"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


class TaskStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"


class AttendanceMark(BaseModel):
    """One user's attendance for one day"""
    user_id: str = Field(..., min_length=1)
    date: date
    status: AttendanceStatus
    daily_task: str = Field(..., min_length=1, max_length=500)
    task_status: TaskStatus
    notes: Optional[str] = Field(None, max_length=1000)


class AttendanceBulk(BaseModel):
    attendance_records: List[AttendanceMark] = Field(..., min_length=1)
