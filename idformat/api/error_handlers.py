"""Error Handlers - map engine, validation and unexpected failures onto one JSON envelope.

Invariants:
    - FormatEngineError → its own to_response() envelope and http_status
    - Store ValidationError and request validation share code VALIDATION_ERROR and
      carry a details list of {field, message, type}, so clients parse one shape
    - Exception (catch-all) → 500 that never leaks internal details

Design Decisions:
    - Client errors (< 500) log at WARNING, server errors at ERROR; the error's
      identifier / rule_code / rule_id context goes into the log record extras
    - Extracted from main.py to keep its import fan-out small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from idformat.core.errors import ErrorSeverity, FormatEngineError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_engine_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_engine_error_handler(app: FastAPI) -> None:

    @app.exception_handler(FormatEngineError)
    async def engine_error_handler(request: Request, exc: FormatEngineError):
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "identifier": exc.context.identifier,
                "rule_code": exc.context.rule_code,
                "rule_id": exc.context.rule_id,
            },
        )
        content = exc.to_response()
        if isinstance(exc, ValidationError):
            content["error"]["details"] = [
                {"field": exc.field, "message": exc.message, "type": "store"},
            ]
        return JSONResponse(status_code=exc.http_status, content=content)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = _field_details(exc)
        logger.warning(
            f"Rejected request: {', '.join(d['field'] for d in details)}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "category": "validation",
                    "severity": ErrorSeverity.ERROR.value,
                    "details": details,
                },
            },
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _field_details(exc: RequestValidationError) -> list[dict]:
    # loc starts with the request part ("body", "path", "query"); keep it in the field name
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
