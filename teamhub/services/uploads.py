"""Local file storage for meeting, paper and event report uploads"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile

from teamhub.config import settings
from teamhub.services.database import db

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

PDF_TYPES = {"application/pdf"}
OFFICE_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


def uploads_dir(category: str) -> Path:
    return Path(settings.uploads_dir) / category


def get_file_extension(filename: str) -> str:
    """Get file extension from filename"""
    return Path(filename).suffix.lower()


def content_type_of(file: UploadFile) -> str:
    return file.content_type or mimetypes.guess_type(file.filename or "")[0] or "application/octet-stream"


def format_file_size(size: Optional[int]) -> str:
    """Bytes as "x.y MB" """
    if not size:
        return "0 MB"
    return f"{size / (1024 * 1024):.1f} MB"


async def save_upload(file: UploadFile, category: str, allowed_types: set, type_error: str) -> dict:
    """Validate and store one upload; returns its metadata"""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    content_type = content_type_of(file)
    if content_type not in allowed_types:
        raise HTTPException(status_code=400, detail=type_error)

    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE // (1024 * 1024)}MB"
        )

    stored_filename = f"{category.rstrip('s')}-{db.generate_id()}{get_file_extension(file.filename)}"
    target_dir = uploads_dir(category)
    target_dir.mkdir(parents=True, exist_ok=True)

    file_path = target_dir / stored_filename
    with open(file_path, "wb") as f:
        f.write(content)

    logger.info(f"Stored upload {file.filename} as {category}/{stored_filename}")
    return {
        "filename": stored_filename,
        "original_name": file.filename,
        "mimetype": content_type,
        "size": len(content),
        "formatted_size": format_file_size(len(content)),
        "url": f"/uploads/{category}/{stored_filename}",
        "uploaded_at": db.timestamp(),
    }


def delete_upload(category: str, filename: Optional[str]):
    """Remove a stored file; missing files are ignored"""
    if not filename:
        return
    file_path = resolve_upload(category, filename)
    if file_path and file_path.exists():
        file_path.unlink()
        logger.info(f"Deleted upload {category}/{filename}")


def resolve_upload(category: str, filename: str) -> Optional[Path]:
    """Path of a stored file, None when the name escapes the category directory"""
    base = uploads_dir(category).resolve()
    file_path = (base / filename).resolve()
    if file_path.parent != base:
        return None
    return file_path
