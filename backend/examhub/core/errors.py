"""Exception handlers producing the shared JSON error envelope."""

import uuid
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from examhub.core.app_exceptions import AppError
from examhub.core.logging import get_logger

logger = get_logger(__name__)

HTTP_422 = 422

# Constraint keys surfaced as "limit" on validation failures (marks, page sizes, names)
_LIMIT_KEYS = ("le", "ge", "lt", "gt", "max_length", "min_length")


class ErrorResponse(BaseModel):
    """Error response envelope: {error_code, message, details, request_id}."""

    error_code: str
    message: str
    details: Any | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str:
    """Request ID assigned by the middleware, or a fresh one outside it."""
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=code,
        message=message,
        details=details,
        request_id=get_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _validation_detail(error: dict[str, Any]) -> dict[str, Any]:
    loc = [str(part) for part in error.get("loc", ())]
    detail: dict[str, Any] = {
        "field": ".".join(loc),
        "issue": error.get("msg", "Validation error"),
        "type": error.get("type", "validation_error"),
    }
    ctx = error.get("ctx") or {}
    for key in _LIMIT_KEYS:
        if isinstance(ctx.get(key), (int, float)):
            detail["limit"] = ctx[key]
            break
    return detail


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Out-of-range marks, bad limits and malformed bodies (422)."""
    return error_response(
        request,
        HTTP_422,
        "VALIDATION_ERROR",
        "Invalid request data",
        [_validation_detail(e) for e in exc.errors()],
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """AppError carries its own code; plain HTTPExceptions map to HTTP_ERROR."""
    if isinstance(exc, AppError):
        return error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        code = detail.pop("code", "HTTP_ERROR")
        message = detail.pop("message", "An error occurred")
        details = detail.pop("details", None) or (detail or None)
    else:
        code, message, details = "HTTP_ERROR", str(exc.detail), None

    return error_response(request, exc.status_code, code, message, details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unhandled becomes INTERNAL_ERROR (500)."""
    from examhub.core.config import settings

    logger.error(
        "Unhandled exception",
        extra={"request_id": get_request_id(request), "path": request.url.path},
        exc_info=exc,
    )

    # Internal details stay out of production responses
    if settings.ENV == "prod":
        message, details = "An internal server error occurred", None
    else:
        message, details = str(exc), {"type": type(exc).__name__}

    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message, details
    )
