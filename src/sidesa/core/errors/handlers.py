"""Exception handlers rendering RFC 7807 Problem Details.

Every error leaves the API in the same shape: ``type``, ``title``,
``status``, ``detail`` and ``instance``, plus the request ID as
``trace_id``. Client errors (4xx) also carry their ``details`` as extra
members, e.g. ``required_permission`` on a denial. Server errors carry
nothing beyond a generic message.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sidesa.config import settings
from sidesa.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """One invalid field in a request body, query or path."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """Problem Details body. Extra members are allowed."""

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request,
    status_code: int,
    error_code: str,
    title: str,
    detail: str,
    errors: list[FieldError] | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=title,
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        errors=errors,
        trace_id=getattr(request.state, "trace_id", None),
    ).model_dump(exclude_none=True)

    for key, value in (extra or {}).items():
        content.setdefault(key, value)

    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render a domain exception.

    5xx errors keep their message and details in the log only.
    """
    server_error = exc.status_code >= 500
    log = logger.error if server_error else logger.warning
    log(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    if server_error:
        return _problem(
            request,
            exc.status_code,
            exc.error_code,
            title="Service Unavailable",
            detail="The service could not complete the request",
        )

    return _problem(
        request,
        exc.status_code,
        exc.error_code,
        title=exc.error_code.replace("_", " ").title(),
        detail=exc.message,
        extra=exc.details,
    )


def _field_path(loc: tuple[Any, ...]) -> str:
    # "body" prefixes every body field
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) if parts else "unknown"


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 with per-field errors."""
    errors = [
        FieldError(
            field=_field_path(error.get("loc", ())),
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return _problem(
        request,
        status.HTTP_400_BAD_REQUEST,
        "validation_error",
        title="Validation Error",
        detail="Request validation failed",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any unexpected exception as an opaque 500."""
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return _problem(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        title="Internal Server Error",
        detail="An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the Problem Details handlers to ``app``."""
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
