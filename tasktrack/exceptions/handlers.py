"""
Exception handlers for the application.

All errors are rendered as RFC 7807 problem details. Service and repository
code never builds responses itself; it raises and these handlers translate.
"""
import sqlite3
from http import HTTPStatus
import logging
from typing import Any, Dict, List, Optional

from tasktrack.adapters.http_framework import HTTPFrameworkAdapter
from tasktrack.exceptions.errors import TaskTrackError, ConflictError, PROBLEM_TYPE_BASE
from tasktrack.monitoring import get_request_id, REQUEST_ID_HEADER

http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
JSONResponse = http_adapter.JSONResponse
RequestValidationError = http_adapter.RequestValidationError
StarletteHTTPException = http_adapter.StarletteHTTPException

logger = logging.getLogger(__name__)

PROBLEM_CONTENT_TYPE = "application/problem+json"


def _request_id(request: Request) -> str:
    return get_request_id() or request.headers.get(REQUEST_ID_HEADER) or '-'


def problem_response(
    request: Request,
    status_code: int,
    problem_type: str,
    title: str,
    detail: str,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Build a problem-details response for the current request."""
    request_id = _request_id(request)
    content = {
        "type": problem_type,
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
        "request_id": request_id,
    }
    if extra:
        content.update(extra)
    response = JSONResponse(status_code=status_code, content=content, media_type=PROBLEM_CONTENT_TYPE)
    if request_id != '-':
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Trace-ID"] = request_id
    return response


async def task_error_handler(request: Request, exc: TaskTrackError) -> JSONResponse:
    """Render a domain or request-level error with its own status and title."""
    logger.warning(
        f"{exc.title} in {request.method} {request.url.path}: {exc.detail}",
        extra={"method": request.method, "path": request.url.path, "status_code": exc.status_code}
    )
    return problem_response(request, exc.status_code, exc.problem_type, exc.title, exc.detail)


def _describe_issue(error: Dict[str, Any]) -> str:
    """Human-readable message for one validation issue."""
    loc = [str(part) for part in error.get("loc", []) if part != "body"]
    field = ".".join(loc)
    if error.get("type") == "missing":
        return f"{field or 'body'} is required"
    if error.get("type") == "string_too_short" and "description" in loc:
        return "Description is required"
    return error.get("msg", "Invalid value")


def format_validation_issues(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce pydantic error dicts to JSON-safe issue entries."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", [])],
            "message": _describe_issue(error),
            "type": error.get("type", "validation_error"),
        }
        for error in errors
    ]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors with per-field issues.
    """
    issues = format_validation_issues(exc.errors())
    logger.warning(
        f"Validation error in {request.method} {request.url.path}: "
        f"{', '.join(issue['message'] for issue in issues)}",
        extra={"method": request.method, "path": request.url.path}
    )
    return problem_response(
        request,
        400,
        f"{PROBLEM_TYPE_BASE}/validation-error",
        "Validation Error",
        "The request body or parameters are invalid.",
        extra={"issues": issues},
    )


async def sqlite_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """
    Handler for SQLite database errors.
    Unique constraint violations are conflicts; anything else is a server fault.
    """
    if isinstance(exc, sqlite3.IntegrityError) and "unique constraint" in str(exc).lower():
        return await task_error_handler(request, ConflictError())

    logger.error(
        f"Database error in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        }
    )
    return problem_response(
        request,
        500,
        f"{PROBLEM_TYPE_BASE}/internal-server-error",
        "Internal Server Error",
        "An unexpected error occurred on the server.",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) as problem details."""
    try:
        title = HTTPStatus(exc.status_code).phrase
    except ValueError:
        title = "HTTP Error"
    response = problem_response(request, exc.status_code, "about:blank", title, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.
    """
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
        }
    )
    return problem_response(
        request,
        500,
        f"{PROBLEM_TYPE_BASE}/internal-server-error",
        "Internal Server Error",
        "An unexpected error occurred on the server.",
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with the FastAPI app.
    """
    app.add_exception_handler(TaskTrackError, task_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
