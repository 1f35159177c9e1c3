"""Exception handlers mapping domain errors to structured JSON responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import ErrorCode, TeamSyncException

logger = logging.getLogger(__name__)


async def teamsync_exception_handler(request: Request, exc: TeamSyncException) -> JSONResponse:
    """Log the error and return ``exc.to_dict()`` with its status code.

    Client errors are logged at warning level, server errors at error level.
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"TeamSyncException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, hide internals from the client."""
    logger.exception("Unhandled exception", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=500,
        content={
            "error": ErrorCode.INTERNAL_ERROR.value,
            "message": "Internal server error",
            "details": {},
        },
    )
