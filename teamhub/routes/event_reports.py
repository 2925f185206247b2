"""Event report routes (single office document per report)"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.models.content import EventReportForm
from teamhub.responses import success
from teamhub.services.documents import DocumentStore, form_fields, parse_form

router = APIRouter()

event_reports = DocumentStore(
    "event_reports", category="event-reports", file_field="event_work", label="Event report"
)


def _parse(name, date_updated, created_by) -> EventReportForm:
    return parse_form(
        EventReportForm, name=name or None, date_updated=date_updated or None, created_by=created_by or None
    )


@router.get("")
async def list_event_reports(auth: AuthContext = Depends(get_auth_context)):
    views = event_reports.all_views()
    return success(data=views, count=len(views))


@router.get("/download/{filename}")
async def download_event_report_file(filename: str, auth: AuthContext = Depends(get_auth_context)):
    return event_reports.download(filename)


@router.get("/{report_id}")
async def get_event_report(report_id: str, auth: AuthContext = Depends(get_auth_context)):
    return success(data=event_reports.view(event_reports.get_or_404(report_id)))


@router.post("")
async def create_event_report(
    name: Optional[str] = Form(None),
    date_updated: Optional[str] = Form(None),
    created_by: Optional[str] = Form(None),
    event_work: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    form = _parse(name, date_updated, created_by)
    if not form.name or not form.date_updated or not form.created_by:
        raise HTTPException(status_code=400, detail="Please provide name, date_updated, and created_by fields")

    report = await event_reports.create(form_fields(form), event_work, submitted_by=auth.user_id)
    return success("Event report created successfully", event_reports.view(report), status_code=201)


@router.put("/{report_id}")
async def update_event_report(
    report_id: str,
    name: Optional[str] = Form(None),
    date_updated: Optional[str] = Form(None),
    created_by: Optional[str] = Form(None),
    event_work: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    report = event_reports.get_or_404(report_id)
    report = await event_reports.update(report, form_fields(_parse(name, date_updated, created_by)), event_work)
    return success("Event report updated successfully", event_reports.view(report))


@router.delete("/{report_id}")
async def delete_event_report(report_id: str, auth: AuthContext = Depends(get_auth_context)):
    event_reports.delete(event_reports.get_or_404(report_id))
    return success("Event report deleted successfully")
