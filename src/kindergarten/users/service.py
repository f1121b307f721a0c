from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.photo_storage import PhotoStorage
from ..common.validators import (
    FieldErrors,
    optional_str,
    require_choice,
    require_email,
    require_min_length,
    require_non_empty,
)
from ..core.constants import PASSWORD_MIN_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import CurrentUser, User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: register, log in, resolve the current user."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: Optional[str] = None,
    ) -> tuple[str, User]:
        errors = FieldErrors()
        email = errors.check(require_email, email)
        errors.check(require_min_length, password, "password", PASSWORD_MIN_LENGTH)
        first_name = errors.check(require_non_empty, first_name, "first_name")
        last_name = errors.check(require_non_empty, last_name, "last_name")
        if role is not None:
            # Self-registration only ever creates parent accounts.
            errors.check(require_choice, role, "role", (Role.PARENT,))
        errors.raise_if_any()

        if self._users.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.PARENT,
            first_name=first_name,
            last_name=last_name,
            phone=optional_str(phone),
        )
        user = self._users.get_by_id(user_id)
        logger.info("registered user %s (%s)", user_id, email)
        return self._tokens.issue(user), user

    def login(self, email: str, password: str) -> tuple[str, User]:
        errors = FieldErrors()
        email = errors.check(require_email, email)
        errors.check(require_non_empty, password, "password")
        errors.raise_if_any()

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hashes
            ok = False
        if not ok:
            logger.info("failed login for %s", email)
            raise AuthenticationError("Invalid email or password")

        return self._tokens.issue(user), user

    def me(self, current: CurrentUser) -> User:
        user = self._users.get_by_id(current.user_id)
        if not user:
            raise AuthenticationError("User no longer exists")
        return user


class UserService:
    """Use case: profile self-service and admin user management."""

    def __init__(self, users: UserRepository, photos: PhotoStorage):
        self._users = users
        self._photos = photos

    def _get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, role: Optional[str] = None) -> Sequence[User]:
        role_filter = require_choice(role, "role", Role) if role else None
        return self._users.list_users(role=role_filter)

    def get_user(self, user_id: int) -> User:
        return self._get(user_id)

    def list_parents(self) -> Sequence[dict]:
        return self._users.list_parents_with_children()

    def list_teachers(self) -> Sequence[dict]:
        return self._users.list_teachers_with_groups()

    def _profile_changes(self, data: dict, *, allow_role: bool) -> dict:
        errors = FieldErrors()
        changes: dict = {}
        if "email" in data:
            changes["email"] = errors.check(require_email, data.get("email"))
        for field in ("first_name", "last_name"):
            if field in data:
                changes[field] = errors.check(require_non_empty, data.get(field), field)
        if "phone" in data:
            changes["phone"] = optional_str(data.get("phone"))
        if "role" in data:
            if not allow_role:
                errors.items.append({"field": "role", "message": "role can only be changed by an administrator"})
            else:
                changes["role"] = errors.check(require_choice, data.get("role"), "role", Role)
        errors.raise_if_any()
        return changes

    def _ensure_email_free(self, email: Optional[str], user_id: int) -> None:
        if not email:
            return
        other = self._users.get_by_email(email)
        if other and other.user_id != int(user_id):
            raise ConflictError("A user with this email already exists")

    def update_me(self, current: CurrentUser, data: dict) -> User:
        changes = self._profile_changes(data, allow_role=False)
        self._get(current.user_id)
        self._ensure_email_free(changes.get("email"), current.user_id)
        if changes:
            self._users.update_user(current.user_id, changes=changes)
        return self._get(current.user_id)

    def change_password(self, current: CurrentUser, *, current_password: str, new_password: str) -> None:
        errors = FieldErrors()
        errors.check(require_non_empty, current_password, "current_password")
        errors.check(require_min_length, new_password, "new_password", PASSWORD_MIN_LENGTH)
        errors.raise_if_any()

        user = self._get(current.user_id)
        if not check_password_hash(user.password_hash, current_password):
            raise ValidationError(
                "Current password is incorrect",
                details=[{"field": "current_password", "message": "current password is incorrect"}],
            )
        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))

    def create_user(self, current: CurrentUser, data: dict) -> User:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can create users")

        errors = FieldErrors()
        email = errors.check(require_email, data.get("email"))
        password = errors.check(require_min_length, data.get("password"), "password", PASSWORD_MIN_LENGTH)
        role = errors.check(require_choice, data.get("role"), "role", Role)
        first_name = errors.check(require_non_empty, data.get("first_name"), "first_name")
        last_name = errors.check(require_non_empty, data.get("last_name"), "last_name")
        errors.raise_if_any()

        if self._users.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            first_name=first_name,
            last_name=last_name,
            phone=optional_str(data.get("phone")),
        )
        logger.info("admin %s created user %s with role %s", current.user_id, user_id, role.value)
        return self._get(user_id)

    def update_user(self, current: CurrentUser, user_id: int, data: dict) -> User:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can edit other users")

        changes = self._profile_changes(data, allow_role=True)
        self._get(user_id)
        self._ensure_email_free(changes.get("email"), user_id)
        if data.get("password"):
            require_min_length(data["password"], "password", PASSWORD_MIN_LENGTH)
            self._users.update_password(int(user_id), password_hash=generate_password_hash(data["password"]))
        if changes:
            self._users.update_user(int(user_id), changes=changes)
        return self._get(user_id)

    def delete_user(self, current: CurrentUser, user_id: int) -> None:
        if not current.is_admin:
            raise AuthorizationError("Only administrators can delete users")
        if int(user_id) == current.user_id:
            raise ValidationError("You cannot delete your own account")

        user = self._get(user_id)
        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("User not found")
        self._photos.delete(user.photo_path)
        logger.info("admin %s deleted user %s", current.user_id, user.user_id)

    def upload_profile_photo(self, current: CurrentUser, user_id: int, *, photo: str, mime_type: Optional[str]) -> User:
        if int(user_id) != current.user_id and not current.is_admin:
            raise AuthorizationError("You can only change your own photo")

        user = self._get(user_id)
        self._photos.replace(
            old_path=user.photo_path,
            prefix="user",
            entity_id=user.user_id,
            data=photo,
            mime_type=mime_type,
            commit=lambda path: self._users.set_photo_path(user.user_id, photo_path=path),
        )
        return self._get(user_id)
