import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from salesdesk.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ConflictError):
        status_code = 409
        error_type = "conflict"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Missing or malformed body fields are a 400, like any other validation error."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    fields = sorted({".".join(str(part) for part in error["loc"] if part != "body") for error in errors} - {""})
    message = f"Invalid or missing fields: {', '.join(fields)}" if fields else "Invalid request"
    return create_json_error_response(status_code=400, message=message, error_type="validation_error")


async def persistence_error_handler(_: Request, exc: Exception) -> Response:
    """Store failures (PersistenceError, PyMongoError) never expose driver messages."""
    logger.error("Persistence error: %s", exc, exc_info=exc)
    return create_json_error_response(
        status_code=500, message="A storage error occurred.", error_type="persistence_error"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
