"""
errors.py — Exception Handlers (API Layer)

Maps domain errors to JSON responses:
    {"code": "...", "message": "...", "errors": [...]}   (errors: validation only)

FastAPI's own request-validation failures are reported in the same shape
as service-level ValidationError, with status 400.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import StoreError, TaskBoardError, ValidationError
from app.core.logging import get_logger

logger = get_logger(__name__)


def _error_response(exc: TaskBoardError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def handle_taskboard_error(request: Request, exc: TaskBoardError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header"))
        text = err.get("msg", "invalid value")
        messages.append(f"{location}: {text}" if location else text)
    return _error_response(ValidationError(messages))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskBoardError, handle_taskboard_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
