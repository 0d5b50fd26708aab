import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from propnet.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PhoneVerificationError,
    ServiceUnavailableError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order, first match wins
USER_ERROR_STATUS: list[tuple[type[Exception], int, str]] = [
    (AuthenticationError, 401, "authentication_error"),
    (AccessDeniedError, 403, "access_denied"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (ValidationError, 400, "validation_error"),
    (PhoneVerificationError, 400, "phone_verification_error"),
    (UpstreamError, 502, "upstream_error"),
    (ServiceUnavailableError, 503, "service_unavailable"),
]


def create_json_error_response(
    status_code: int, message: str, error_type: str | None = None, extra: dict[str, str | None] | None = None
) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content: dict[str, str | None] = {"message": message}
    if error_type:
        content["type"] = error_type
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    status_code, error_type = 400, "bad_request"
    for error_class, code, name in USER_ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code, error_type = code, name
            break

    extra = None
    if isinstance(exc, ConflictError):
        # Report the state the record is already in
        extra = {"action": exc.action}

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type, extra=extra)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Report malformed request bodies and parameters as 400 with the offending field."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return create_json_error_response(status_code=400, message=message, error_type="validation_error")


async def storage_error_handler(_: Request, exc: Exception) -> Response:
    """Handle database failures (500) without leaking driver details."""
    logger.exception("Storage error: %s", exc)
    return create_json_error_response(status_code=500, message="Storage error", error_type="storage_error")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
