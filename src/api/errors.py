"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services.errors import (
    ActConflictError,
    ActsError,
    InvalidInputError,
    NoBillableTripsError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

HTTP_STATUS_BY_ERROR: dict[type[ActsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NoBillableTripsError: 422,
    ActConflictError: status.HTTP_409_CONFLICT,
}


def http_status_for(error: ActsError) -> int:
    for error_type in type(error).__mro__:
        if error_type in HTTP_STATUS_BY_ERROR:
            return HTTP_STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(code: str, message: str) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": code,
            "message": message,
        }
    }


async def acts_error_handler(request: Request, exc: ActsError) -> JSONResponse:
    status_code = http_status_for(exc)
    logger.warning("%s %s -> %d %s: %s", request.method, request.url.path, status_code, exc.code, exc.message)
    return JSONResponse(status_code=status_code, content=error_response(exc.code, exc.message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response("internal_error", "Server error"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ActsError, acts_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = ["HTTP_STATUS_BY_ERROR", "error_response", "http_status_for", "register_error_handlers"]
