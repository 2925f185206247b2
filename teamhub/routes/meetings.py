"""Meeting routes (multipart, up to five PDF attachments)"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.models.content import MeetingForm
from teamhub.responses import success
from teamhub.services.activity import record_activity
from teamhub.services.content import content_stats, list_authors, list_published, missing_roles, role_summary
from teamhub.services.database import db, Q
from teamhub.services.documents import parse_form
from teamhub.services.projects import iso
from teamhub.services.uploads import PDF_TYPES, delete_upload, save_upload

logger = logging.getLogger(__name__)
router = APIRouter()

UPLOAD_CATEGORY = "meetings"
MAX_FILES = 5


def _json_list(value: Optional[str]) -> Optional[list]:
    """Form fields carry lists as JSON or as comma separated text"""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return [part.strip() for part in value.split(",") if part.strip()]
    return parsed if isinstance(parsed, list) else [parsed]


async def _store_files(files: Optional[List[UploadFile]]) -> List[dict]:
    uploads = [f for f in (files or []) if f.filename]
    if len(uploads) > MAX_FILES:
        raise HTTPException(status_code=400, detail=f"A meeting can have at most {MAX_FILES} files")

    stored = []
    try:
        for upload in uploads:
            stored.append(await save_upload(
                upload, UPLOAD_CATEGORY, PDF_TYPES, "Only PDF files are allowed!"
            ))
    except HTTPException:
        for meta in stored:
            delete_upload(UPLOAD_CATEGORY, meta["filename"])
        raise
    return stored


def _check_participants(participants: Optional[List[str]]):
    if participants and missing_roles(participants):
        raise HTTPException(
            status_code=400,
            detail="One or more invalid participant IDs. All participants must exist in the system."
        )


def meeting_view(meeting: dict) -> dict:
    return {
        **meeting,
        "author": role_summary(meeting.get("author")),
        "participants": [role_summary(pid) for pid in meeting.get("participants", [])],
    }


@router.get("")
async def list_meetings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    filter: str = Query("all", pattern="^(all|recent)$"),
    author: str = "",
    sort_by: str = "date_published",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
):
    meetings, pagination = list_published(
        db.meetings, search, filter, author, sort_by, sort_order, page, limit
    )
    return success(
        "Meetings retrieved successfully",
        [meeting_view(m) for m in meetings],
        pagination=pagination
    )


@router.get("/stats")
async def meeting_stats():
    return success("Meeting statistics retrieved successfully", content_stats(db.meetings))


@router.get("/authors")
async def meeting_authors():
    return success("Authors retrieved successfully", list_authors())


@router.get("/{meeting_id}")
async def get_meeting(meeting_id: str):
    meeting = db.get_by_id(db.meetings, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")

    meeting["views"] = meeting.get("views", 0) + 1
    db.meetings.update({"views": meeting["views"]}, Q.id == meeting_id)
    return success("Meeting retrieved successfully", meeting_view(meeting))


@router.post("")
async def create_meeting(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    participants: Optional[str] = Form(None),
    date_published: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    form = parse_form(
        MeetingForm,
        title=title, content=content, author=author,
        participants=_json_list(participants),
        date_published=date_published or None,
        tags=_json_list(tags),
    )
    if not form.title or not form.content or not form.author:
        raise HTTPException(status_code=400, detail="Title, content, and author are required")
    if missing_roles([form.author]):
        raise HTTPException(status_code=400, detail="Invalid author ID. Author must exist in the system.")
    _check_participants(form.participants)

    stored = await _store_files(files)

    now = db.timestamp()
    meeting = {
        "id": db.generate_id(),
        "title": form.title.strip(),
        "content": form.content.strip(),
        "author": form.author,
        "participants": form.participants or [],
        "date_published": iso(form.date_published) or now,
        "files": stored,
        "tags": form.tags or [],
        "is_published": True,
        "views": 0,
        "created_by": auth.user_id,
        "created_at": now,
        "updated_at": now,
    }
    db.meetings.insert(meeting)

    record_activity(
        auth.user_id, "created", "meeting", meeting["id"], meeting["title"],
        f"Created meeting: \"{meeting['title']}\""
    )
    return success("Meeting created successfully", meeting_view(meeting), status_code=201)


@router.put("/{meeting_id}")
async def update_meeting(
    meeting_id: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    participants: Optional[str] = Form(None),
    date_published: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    is_published: Optional[bool] = Form(None),
    existing_files: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Update a meeting; listed existing files are kept and new uploads appended"""
    meeting = db.get_by_id(db.meetings, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")

    form = parse_form(
        MeetingForm,
        title=title or None, content=content or None, author=author or None,
        participants=_json_list(participants),
        date_published=date_published or None,
        tags=_json_list(tags),
        is_published=is_published,
    )
    if form.author and form.author != meeting.get("author") and missing_roles([form.author]):
        raise HTTPException(status_code=400, detail="Invalid author ID. Author must exist in the system.")
    _check_participants(form.participants)

    current = meeting.get("files", [])
    if existing_files is not None:
        keep = {
            f["filename"] if isinstance(f, dict) else f
            for f in (_json_list(existing_files) or [])
        }
        kept = [f for f in current if f["filename"] in keep]
    else:
        kept = current

    new_files = [f for f in (files or []) if f.filename]
    if len(kept) + len(new_files) > MAX_FILES:
        raise HTTPException(status_code=400, detail=f"A meeting can have at most {MAX_FILES} files")
    stored = await _store_files(new_files)

    for dropped in current:
        if dropped not in kept:
            delete_upload(UPLOAD_CATEGORY, dropped["filename"])

    updates = {"files": kept + stored, "updated_at": db.timestamp()}
    if form.title:
        updates["title"] = form.title.strip()
    if form.content:
        updates["content"] = form.content.strip()
    if form.author:
        updates["author"] = form.author
    if form.participants is not None:
        updates["participants"] = form.participants
    if form.date_published:
        updates["date_published"] = iso(form.date_published)
    if form.tags is not None:
        updates["tags"] = form.tags
    if form.is_published is not None:
        updates["is_published"] = form.is_published

    db.meetings.update(updates, Q.id == meeting_id)
    meeting.update(updates)

    record_activity(
        auth.user_id, "updated", "meeting", meeting_id, meeting["title"],
        f"Updated meeting: \"{meeting['title']}\""
    )
    return success("Meeting updated successfully", meeting_view(meeting))


@router.delete("/{meeting_id}")
async def delete_meeting(meeting_id: str, auth: AuthContext = Depends(get_auth_context)):
    meeting = db.get_by_id(db.meetings, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")

    db.meetings.remove(Q.id == meeting_id)
    for stored in meeting.get("files", []):
        delete_upload(UPLOAD_CATEGORY, stored["filename"])

    record_activity(
        auth.user_id, "deleted", "meeting", meeting_id, meeting["title"],
        f"Deleted meeting: \"{meeting['title']}\""
    )
    return success("Meeting deleted successfully")
