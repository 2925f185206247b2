"""Attendance routes"""

import logging
import math
from collections import Counter
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.models.attendance import AttendanceMark, AttendanceBulk
from teamhub.responses import success
from teamhub.services.activity import record_activity
from teamhub.services.database import db, Q, DuplicateRecordError
from teamhub.services.projects import user_label

logger = logging.getLogger(__name__)
router = APIRouter()


def _sorted(records: list) -> list:
    return sorted(records, key=lambda r: (r["date"], r.get("created_at", "")), reverse=True)


def mark_attendance(data: AttendanceMark, marker: dict):
    """
    Create or update the record for (user, day).

    Returns the record and whether it already existed. The lookup comes
    first, so marking the same day twice updates in place.
    """
    user = db.get_user_by_id(data.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    day = data.date.isoformat()
    fields = {
        "user_id": user["id"],
        "user_name": user_label(user),
        "user_email": user["email"],
        "date": day,
        "status": data.status.value,
        "daily_task": data.daily_task.strip(),
        "task_status": data.task_status.value,
        "notes": (data.notes or "").strip(),
        "marked_by": marker["id"],
        "marked_by_name": user_label(marker),
        "updated_at": db.timestamp(),
    }

    existing = db.get_attendance_for_day(user["id"], day)
    if existing:
        db.attendance.update(fields, Q.id == existing["id"])
        return {**existing, **fields}, True

    record = {"id": db.generate_id(), "created_at": fields["updated_at"], **fields}
    try:
        db.insert_attendance(record)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return record, False


@router.get("")
async def list_attendance(
    date: Optional[date] = None,
    user_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context)
):
    """Attendance records, newest day first"""
    query = Q.noop()
    if date:
        query = query & (Q.date == date.isoformat())
    if user_id:
        query = query & (Q.user_id == user_id)

    records = _sorted(db.attendance.search(query))
    total = len(records)
    start = (page - 1) * limit

    return success(
        data=records[start:start + limit],
        pagination={
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "total_records": total,
            "has_next": page * limit < total,
            "has_prev": page > 1,
        }
    )


@router.get("/summary")
async def attendance_summary(
    start_date: date,
    end_date: date,
    auth: AuthContext = Depends(get_auth_context)
):
    """Counts per day and status between two dates, inclusive"""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    start, end = start_date.isoformat(), end_date.isoformat()
    records = db.attendance.search((Q.date >= start) & (Q.date <= end))
    counts = Counter((r["date"], r["status"]) for r in records)

    summary = [
        {"date": day, "status": status, "count": count}
        for (day, status), count in counts.items()
    ]
    summary.sort(key=lambda s: s["status"])
    summary.sort(key=lambda s: s["date"], reverse=True)
    return success(data=summary)


@router.get("/date/{day}")
async def attendance_for_date(day: date, auth: AuthContext = Depends(get_auth_context)):
    records = _sorted(db.attendance.search(Q.date == day.isoformat()))
    return success(data=records)


@router.post("")
async def create_or_update_attendance(data: AttendanceMark, auth: AuthContext = Depends(get_auth_context)):
    """Mark attendance; a second mark for the same user and day updates the first"""
    record, existed = mark_attendance(data, auth.user)

    record_activity(
        auth.user_id, "updated" if existed else "created", "attendance", record["id"],
        f"{record['user_name']} - {record['date']}",
        f"Marked {record['user_name']} {record['status']} on {record['date']}"
    )
    message = "Attendance updated successfully" if existed else "Attendance created successfully"
    return success(message, record)


@router.post("/bulk")
async def bulk_attendance(data: AttendanceBulk, auth: AuthContext = Depends(get_auth_context)):
    """Mark many records; failures are collected per record"""
    results = []
    errors = []
    for mark in data.attendance_records:
        try:
            record, _ = mark_attendance(mark, auth.user)
            results.append(record)
        except HTTPException as e:
            errors.append({"record": mark.model_dump(mode="json"), "error": e.detail})

    return success(
        f"Processed {len(results)} successful and {len(errors)} failed records",
        {
            "successful": len(results),
            "failed": len(errors),
            "results": results,
            "errors": errors,
        }
    )


@router.delete("/{record_id}")
async def delete_attendance(record_id: str, auth: AuthContext = Depends(get_auth_context)):
    if not db.attendance.remove(Q.id == record_id):
        raise HTTPException(status_code=404, detail="Attendance record not found")
    return success("Attendance record deleted successfully")
