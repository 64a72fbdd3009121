import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from edumanager.errors import DuplicateFieldError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, DuplicateFieldError):
        status_code = 409
        error_type = "duplicate_field"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def allocation_exhausted_handler(_: Request, exc: Exception) -> Response:
    logger.error("allocation_exhausted", error=str(exc))
    return create_json_error_response(status_code=500, message=str(exc), error_type="allocation_exhausted")


async def store_unavailable_handler(_: Request, exc: Exception) -> Response:
    logger.error("store_unavailable", error=str(exc))
    return create_json_error_response(
        status_code=503, message="Database is temporarily unavailable.", error_type="store_unavailable"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
