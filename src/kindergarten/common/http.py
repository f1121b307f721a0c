from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError
from .validators import optional_int, require_date, require_int

logger = logging.getLogger(__name__)


class ApiJSONProvider(DefaultJSONProvider):
    """JSON provider with ISO dates, plain numbers for DECIMAL columns and enum values."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, (datetime, date, time)):
            return o.isoformat()
        if isinstance(o, timedelta):
            return str(o)
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, Enum):
            return o.value
        return DefaultJSONProvider.default(o)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str, *, required: bool = True) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        if required:
            raise ValidationError(f"{name} is required", details=[{"field": name, "message": f"{name} is required"}])
        return None
    return require_date(value, name)


def query_int(name: str, *, required: bool = True, **bounds) -> Optional[int]:
    value = request.args.get(name)
    if required:
        if value in (None, ""):
            raise ValidationError(f"{name} is required", details=[{"field": name, "message": f"{name} is required"}])
        return require_int(value, name, **bounds)
    return optional_int(value, name, **bounds)


def register_error_handlers(app: Flask) -> None:
    """Single place where exceptions become JSON error responses."""

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return jsonify({"message": e.message, "details": e.details}), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"message": e.description or e.name, "details": None}), e.code

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"message": message, "details": None}), 500
