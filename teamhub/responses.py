"""Response envelope and exception handlers

Every response body has the shape ``{success, message?, data?, error?}``.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


def success(message: Optional[str] = None, data: Any = None, status_code: int = 200, **extra) -> JSONResponse:
    """Build a success envelope; extra keys (pagination, count...) sit next to data"""
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_body(message: str, error: Any = None, **extra) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    body.update(extra)
    return body


def _validation_messages(exc: RequestValidationError) -> list:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        field = ".".join(loc)
        msg = err.get("msg", "Invalid value")
        # raised ValueErrors keep their own text, without pydantic's "Value error, " prefix
        if err.get("type") == "value_error" and err.get("ctx", {}).get("error") is not None:
            msg = str(err["ctx"]["error"])
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def register_exception_handlers(app: FastAPI, debug: bool = False):
    """Render errors with the response envelope"""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # dict details carry extra envelope keys, e.g. the OAuth diagnostics
        if isinstance(exc.detail, dict):
            detail = dict(exc.detail)
            body = error_body(detail.pop("message", "Request failed"), **detail)
        else:
            body = error_body(str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(body),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = _validation_messages(exc)
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder(error_body(", ".join(messages) or "Validation failed", errors=messages))
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", error=str(exc) if debug else None)
        )
