from .api import KindergartenClient
from .errors import (
    ApiAuthenticationError,
    ApiAuthorizationError,
    ApiConflictError,
    ApiError,
    ApiNotFoundError,
    ApiServerError,
    ApiValidationError,
)

__all__ = [
    "KindergartenClient",
    "ApiError",
    "ApiValidationError",
    "ApiAuthenticationError",
    "ApiAuthorizationError",
    "ApiNotFoundError",
    "ApiConflictError",
    "ApiServerError",
]
