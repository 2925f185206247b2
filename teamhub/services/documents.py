"""Records that carry at most one office document (papers, event reports)"""

import logging
from datetime import datetime
from typing import Optional, Type, TypeVar

from fastapi import HTTPException, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from pydantic import BaseModel, ValidationError

from teamhub.services.database import db, Q
from teamhub.services.projects import iso
from teamhub.services.uploads import OFFICE_TYPES, delete_upload, resolve_upload, save_upload

logger = logging.getLogger(__name__)

OFFICE_TYPE_ERROR = "Invalid file type. Only PDF, DOC, DOCX, XLS, XLSX, PPT, PPTX files are allowed."

FormT = TypeVar("FormT", bound=BaseModel)


def parse_form(model: Type[FormT], **fields) -> FormT:
    """Build a form model; failures render like body validation errors"""
    try:
        return model(**fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


def form_fields(form: BaseModel) -> dict:
    """Submitted form values ready for storage: text stripped, dates as ISO strings"""
    fields = {}
    for key, value in form.model_dump(exclude_none=True).items():
        if isinstance(value, datetime):
            value = iso(value)
        elif isinstance(value, str):
            value = value.strip()
        fields[key] = value
    return fields


def work_file(meta: Optional[dict]) -> Optional[dict]:
    if not meta:
        return None
    return {
        "filename": meta["filename"],
        "original_name": meta["original_name"],
        "mimetype": meta["mimetype"],
        "size": meta["formatted_size"],
        "url": meta["url"],
    }


class DocumentStore:
    """One TinyDB table whose records hold an optional uploaded file under ``file_field``"""

    def __init__(self, table_name: str, category: str, file_field: str, label: str):
        self.table_name = table_name
        self.category = category
        self.file_field = file_field
        self.label = label

    @property
    def table(self):
        return getattr(db, self.table_name)

    def view(self, record: dict) -> dict:
        work = record.get(self.file_field)
        return {**record, "formatted_size": work["size"] if work else "0 MB"}

    def all_views(self) -> list:
        records = sorted(self.table.all(), key=lambda r: r.get("created_at", ""), reverse=True)
        return [self.view(r) for r in records]

    def get_or_404(self, record_id: str) -> dict:
        record = db.get_by_id(self.table, record_id)
        if not record:
            raise HTTPException(status_code=404, detail=f"{self.label} not found")
        return record

    async def _store_file(self, upload: Optional[UploadFile]) -> Optional[dict]:
        if upload is None or not upload.filename:
            return None
        stored = await save_upload(upload, self.category, OFFICE_TYPES, OFFICE_TYPE_ERROR)
        return work_file(stored)

    def _discard_file(self, record: dict):
        if record.get(self.file_field):
            delete_upload(self.category, record[self.file_field]["filename"])

    async def create(self, fields: dict, upload: Optional[UploadFile], submitted_by: str) -> dict:
        now = db.timestamp()
        record = {
            "id": db.generate_id(),
            **fields,
            self.file_field: await self._store_file(upload),
            "submitted_by": submitted_by,
            "created_at": now,
            "updated_at": now,
        }
        self.table.insert(record)
        logger.info(f"{self.label} created: {record['id']}")
        return record

    async def update(self, record: dict, fields: dict, upload: Optional[UploadFile]) -> dict:
        """Apply changed fields; a new file replaces the stored one"""
        updates = {**fields, "updated_at": db.timestamp()}
        stored = await self._store_file(upload)
        if stored:
            self._discard_file(record)
            updates[self.file_field] = stored

        self.table.update(updates, Q.id == record["id"])
        record.update(updates)
        return record

    def delete(self, record: dict):
        self._discard_file(record)
        self.table.remove(Q.id == record["id"])
        logger.info(f"{self.label} deleted: {record['id']}")

    def download(self, filename: str) -> FileResponse:
        record = self.table.get(Q[self.file_field].filename == filename)
        file_path = resolve_upload(self.category, filename)
        if not record or not file_path or not file_path.exists():
            raise HTTPException(status_code=404, detail="File not found")

        work = record[self.file_field]
        return FileResponse(path=str(file_path), filename=work["original_name"], media_type=work["mimetype"])
