"""Error Handlers — global exception handlers for the team builder API.

Invariants:
    - TeamBuilderError -> its own status and to_response() body
    - RequestValidationError -> 400; INVALID_CONFIG when the failing field is a
      component config, VALIDATION_ERROR otherwise, always with field details
    - Exception (catch-all) -> 500 that never leaks internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from team_builder.core.errors import (
    INVALID_CONFIG,
    ErrorCategory,
    ErrorSeverity,
    TeamBuilderError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(TeamBuilderError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_domain_error(request: Request, exc: TeamBuilderError) -> JSONResponse:
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        "%s on %s: %s", exc.code, request.url.path, exc.message,
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "builder_id": exc.context.builder_id,
            "node_id": exc.context.node_id,
            "edge_id": exc.context.edge_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    code = INVALID_CONFIG if _is_config_error(exc) else "VALIDATION_ERROR"
    logger.warning(
        "%s on %s: %d field error(s)", code, request.url.path, len(details),
        extra={"error_code": code, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            code, "Invalid request data", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s: %s", request.url.path, exc,
        exc_info=True, extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _is_config_error(exc: RequestValidationError) -> bool:
    """True when every failing location sits inside the body's config field."""
    locations = [e["loc"] for e in exc.errors()]
    return bool(locations) and all(
        len(loc) > 1 and loc[0] == "body" and loc[1] == "config"
        for loc in locations
    )


def _error_body(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    details: list[dict] | None = None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}
