from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _fail(field_name: str, message: str) -> ValidationError:
    return ValidationError(message, details=[{"field": field_name, "message": message}])


class FieldErrors:
    """Collects field errors so a request reports all of them at once."""

    def __init__(self):
        self.items: list[dict] = []

    def check(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return fn(*args, **kwargs)
        except ValidationError as e:
            self.items.extend(e.details or [{"field": None, "message": e.message}])
            return None

    def raise_if_any(self) -> None:
        if self.items:
            raise ValidationError("Validation failed", details=self.items)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise _fail(field_name, f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise _fail(field_name, f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Optional[str], field_name: str = "email") -> str:
    value = require_non_empty(value, field_name)
    if not _EMAIL_RE.match(value):
        raise _fail(field_name, f"{field_name} is not a valid email")
    return value.lower()


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise _fail(field_name, f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise _fail(field_name, f"{field_name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise _fail(field_name, f"{field_name} must be an integer")
    if min_value is not None and number < min_value:
        raise _fail(field_name, f"{field_name} must be >= {min_value}")
    if max_value is not None and number > max_value:
        raise _fail(field_name, f"{field_name} must be <= {max_value}")
    return number


def optional_int(value: Any, field_name: str, **bounds) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name, **bounds)


def require_number(
    value: Any,
    field_name: str,
    *,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> float:
    if isinstance(value, bool):
        raise _fail(field_name, f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise _fail(field_name, f"{field_name} must be a number")
    if not math.isfinite(number):
        raise _fail(field_name, f"{field_name} must be a finite number")
    if min_value is not None and number < min_value:
        raise _fail(field_name, f"{field_name} must be >= {min_value:g}")
    if max_value is not None and number > max_value:
        raise _fail(field_name, f"{field_name} must be <= {max_value:g}")
    return number


def optional_number(value: Any, field_name: str, **bounds) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_number(value, field_name, **bounds)


def require_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if value in (0, 1) and not isinstance(value, float):
        return bool(value)
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise _fail(field_name, f"{field_name} must be true or false")


def require_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", value):
        raise _fail(field_name, f"{field_name} must be a date in YYYY-MM-DD format")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise _fail(field_name, f"{field_name} is not a valid date")


def require_time(value: Any, field_name: str) -> time:
    if isinstance(value, time):
        return value
    v = (value or "").strip() if isinstance(value, str) else ""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise _fail(field_name, f"{field_name} must be a time in HH:MM format")


def require_choice(value: Any, field_name: str, choices: Iterable):
    """Coerce `value` into one of `choices` (enum classes are accepted)."""

    options = list(choices)
    for option in options:
        if value == option or value == getattr(option, "value", object()):
            return option
    allowed = ", ".join(str(getattr(o, "value", o)) for o in options)
    raise _fail(field_name, f"{field_name} must be one of: {allowed}")


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
