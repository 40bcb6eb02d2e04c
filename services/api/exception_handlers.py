"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from core.exceptions import NotFoundError, ObjectsError, ValidationError


async def objects_exception_handler(request: Request, exc: ObjectsError) -> JSONResponse:
    """Handle objects API exceptions."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND

    log = logger.error if status_code >= 500 else logger.info
    log(
        "{method} {path} -> {status}: {type} - {message}",
        method=request.method,
        path=request.url.path,
        status=status_code,
        type=type(exc).__name__,
        message=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed requests with 400 like every other input error."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "message": "Invalid request",
            "details": {"fields": ", ".join(fields)},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and answer 500 without leaking internals."""
    logger.opt(exception=exc).error("Unhandled exception on {method} {path}", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "Internal server error",
            "details": {},
        },
    )
