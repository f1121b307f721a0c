"""Bearer-token guards for Flask views.

The container is looked up from `current_app.extensions["kindergarten"]`, so
the decorators work for any app built by `create_app`.
"""

from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import CurrentUser


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization token is missing")
    return token.strip()


def authenticate_request() -> CurrentUser:
    container = current_app.extensions["kindergarten"]
    user = container.token_service.decode(_bearer_token())
    g.current_user = user
    return user


def current_user() -> CurrentUser:
    user = g.get("current_user")
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {Role(r) for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = authenticate_request()
            if user.role not in allowed:
                raise AuthorizationError("You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator
