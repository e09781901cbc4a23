"""Maps core errors onto HTTP responses.

The core raises typed errors and never answers HTTP itself; this module
is the one place where an error type becomes a status code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from exceptions.exceptions import (
    AttachmentMissingError,
    ContentGenerationError,
    MalformedModelOutputError,
    PermanentUpstreamError,
    TransientUpstreamError,
    UnknownSessionError,
)

from ..models.api_models import ErrorResponse


logger = logging.getLogger(__name__)


STATUS_BY_ERROR = (
    (UnknownSessionError, 404),
    (AttachmentMissingError, 400),
    (TransientUpstreamError, 503),
    (PermanentUpstreamError, 502),
    (MalformedModelOutputError, 502),
)


def status_for(error: ContentGenerationError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def _error_body(message: str, kind: str) -> dict:
    return ErrorResponse(error=message, kind=kind).model_dump()


async def _content_error_handler(request: Request, exc: ContentGenerationError) -> JSONResponse:
    status = status_for(exc)
    logger.warning(
        "[API] %s %s -> HTTP %s (%s): %s",
        request.method,
        request.url.path,
        status,
        exc.kind_name,
        exc,
    )
    return JSONResponse(status_code=status, content=_error_body(str(exc), exc.kind_name))


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    kind = "bad_request" if exc.status_code < 500 else "internal"
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail), kind))


def _describe_validation_errors(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(problems)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_errors(exc)
    logger.info("[API] %s %s -> HTTP 400: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content=_error_body(message, "bad_request"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ContentGenerationError, _content_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
