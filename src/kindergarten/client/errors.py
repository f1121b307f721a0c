from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """Error response from the kindergarten API."""

    status_code: Optional[int] = None

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ApiValidationError(ApiError):
    status_code = 400


class ApiAuthenticationError(ApiError):
    status_code = 401


class ApiAuthorizationError(ApiError):
    status_code = 403


class ApiNotFoundError(ApiError):
    status_code = 404


class ApiConflictError(ApiError):
    status_code = 409


class ApiServerError(ApiError):
    """5xx responses and transport failures that outlived the retries."""


_BY_STATUS = {
    400: ApiValidationError,
    401: ApiAuthenticationError,
    403: ApiAuthorizationError,
    404: ApiNotFoundError,
    409: ApiConflictError,
}


def error_for_status(status_code: int, message: str, details: Any = None) -> ApiError:
    if status_code >= 500:
        cls = ApiServerError
    else:
        cls = _BY_STATUS.get(status_code, ApiError)
    return cls(message, status_code=status_code, details=details)
