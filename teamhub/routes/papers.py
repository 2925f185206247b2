"""Paper routes (single office document per paper)"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.models.content import PaperForm
from teamhub.responses import success
from teamhub.services.documents import DocumentStore, form_fields, parse_form

router = APIRouter()

papers = DocumentStore("papers", category="papers", file_field="paper_work", label="Paper")


@router.get("")
async def list_papers(auth: AuthContext = Depends(get_auth_context)):
    views = papers.all_views()
    return success(data=views, count=len(views))


@router.get("/download/{filename}")
async def download_paper_file(filename: str, auth: AuthContext = Depends(get_auth_context)):
    """Download a stored paper file"""
    return papers.download(filename)


@router.get("/{paper_id}")
async def get_paper(paper_id: str, auth: AuthContext = Depends(get_auth_context)):
    return success(data=papers.view(papers.get_or_404(paper_id)))


@router.post("")
async def create_paper(
    name: Optional[str] = Form(None),
    date_update: Optional[str] = Form(None),
    assignee: Optional[str] = Form(None),
    paper_work: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    form = parse_form(PaperForm, name=name or None, date_update=date_update or None, assignee=assignee or None)
    if not form.name or not form.date_update or not form.assignee:
        raise HTTPException(status_code=400, detail="Please provide name, date_update, and assignee fields")

    paper = await papers.create(form_fields(form), paper_work, submitted_by=auth.user_id)
    return success("Paper created successfully", papers.view(paper), status_code=201)


@router.put("/{paper_id}")
async def update_paper(
    paper_id: str,
    name: Optional[str] = Form(None),
    date_update: Optional[str] = Form(None),
    assignee: Optional[str] = Form(None),
    paper_work: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context)
):
    """Update a paper; a new file replaces the stored one"""
    paper = papers.get_or_404(paper_id)
    form = parse_form(PaperForm, name=name or None, date_update=date_update or None, assignee=assignee or None)

    paper = await papers.update(paper, form_fields(form), paper_work)
    return success("Paper updated successfully", papers.view(paper))


@router.delete("/{paper_id}")
async def delete_paper(paper_id: str, auth: AuthContext = Depends(get_auth_context)):
    papers.delete(papers.get_or_404(paper_id))
    return success("Paper deleted successfully")
