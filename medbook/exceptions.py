import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling core."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(SchedulingError):
    """Malformed input: bad time format, end before start, invalid date, short reason."""

    status_code = 400


class NotFoundError(SchedulingError):
    status_code = 404


class ForbiddenError(SchedulingError):
    status_code = 403


class ConflictError(SchedulingError):
    """Overlap with an existing availability window or appointment."""

    status_code = 409


class PreconditionError(SchedulingError):
    """A status-machine guard failed."""

    status_code = 400


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Scheduling error on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
