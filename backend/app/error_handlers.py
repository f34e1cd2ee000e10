"""
Exception handlers for the API.

Every error response, including the framework's own 404 and 405, carries the
same JSON envelope:
    {"detail": "...", "status_code": 403}
Validation failures add an "errors" list. The request ID goes to the log and
the X-Request-ID header, not into the body.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from core.logging import get_logger

logger = get_logger("api.errors")


def _request_id() -> str:
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def error_body(detail: str, status_code: int, **extra) -> dict:
    return {"detail": detail, "status_code": status_code, **extra}


def jsonable_errors(exc: ValidationError | RequestValidationError) -> list[dict]:
    """Validation errors without their non-serializable ``ctx``/``input`` parts."""
    return [{key: error[key] for key in ("type", "loc", "msg") if key in error} for error in exc.errors()]


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(
        "http_error",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=_request_id(),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), exc.status_code),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    errors = jsonable_errors(exc)
    logger.info("validation_error", path=request.url.path, errors=errors, request_id=_request_id())
    return JSONResponse(
        status_code=422,
        content=error_body("Validation error", 422, errors=errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        request_id=_request_id(),
    )
    return JSONResponse(status_code=500, content=error_body("Internal server error", 500))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
