"""Application errors carrying a stable error code for the JSON envelope."""

from typing import Any, NoReturn

from fastapi import HTTPException, status


class AppError(HTTPException):
    """HTTP error with an ``error_code`` clients can switch on (e.g. RESULT_EXISTS)."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        super().__init__(
            status_code=status_code,
            detail={"code": code, "message": message, "details": details},
        )
        self.code = code
        self.message = message
        self.details = details


def raise_app_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | list[Any] | None = None,
) -> NoReturn:
    raise AppError(status_code=status_code, code=code, message=message, details=details)


def raise_not_found(code: str, message: str, details: dict[str, Any] | None = None) -> NoReturn:
    """404 for a missing exam year, school, district, registration or result."""
    raise_app_error(status.HTTP_404_NOT_FOUND, code, message, details)


def conflict_error(code: str, message: str, details: dict[str, Any] | None = None) -> AppError:
    """409 error, returned rather than raised so callers can chain the database error."""
    return AppError(status_code=status.HTTP_409_CONFLICT, code=code, message=message, details=details)
