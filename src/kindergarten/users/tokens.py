from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from ..core.constants import DEFAULT_TOKEN_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import CurrentUser, User

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and verifies HS256 bearer tokens carrying user id and role."""

    def __init__(self, secret: str, *, algorithm: str = "HS256", expire_hours: float = DEFAULT_TOKEN_HOURS):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._expire_hours = expire_hours

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.user_id),
            "id": user.user_id,
            "role": user.role.value,
            "iat": now,
            "exp": now + timedelta(hours=self._expire_hours),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> CurrentUser:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.debug("token rejected: %s", e)
            raise AuthenticationError("Invalid or expired token")

        try:
            return CurrentUser(user_id=int(payload["sub"]), role=Role(payload["role"]))
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Malformed token payload")
