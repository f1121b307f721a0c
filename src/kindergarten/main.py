from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, request, send_from_directory

from config import get_settings_module

from .common.http import ApiJSONProvider, register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .attendance.controller import register as register_attendance
from .children.controller import register as register_children
from .contacts.controller import register as register_contacts
from .finance.controller import register as register_finance
from .groups.controller import register as register_groups
from .menu.controller import register as register_menu
from .paid_services.controller import register as register_services
from .progress.controller import register as register_progress
from .recommendations.controller import register as register_recommendations
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

_CONTROLLERS = (
    register_users,
    register_groups,
    register_children,
    register_attendance,
    register_schedules,
    register_progress,
    register_services,
    register_finance,
    register_recommendations,
    register_menu,
    register_contacts,
)


def _check_production(settings: Any, settings_module: str) -> None:
    if settings_module != "config.production":
        return
    missing = []
    if not getattr(settings, "JWT_SECRET", None):
        missing.append("JWT_SECRET")
    if not getattr(settings, "DB_CONFIG", {}).get("password"):
        missing.append("DB_PASSWORD")
    if missing:
        raise SystemExit(f"Refusing to start in production without: {', '.join(missing)}")


def _bootstrap_database(settings: Any) -> None:
    db_config = getattr(settings, "DB_CONFIG")
    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=_PROJECT_ROOT / "database" / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        apply_seed_sql(db_config, seed_path=_PROJECT_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")


def create_app(settings: Any = None, *, container: Optional[Container] = None) -> Flask:
    """Build the API app.

    `settings` defaults to the module chosen by APP_ENV; passing `container`
    skips database bootstrap and MySQL wiring (used by tests).
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    if settings is None:
        settings = importlib.import_module(settings_module)
        _check_production(settings, settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.json = ApiJSONProvider(app)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["UPLOAD_DIR"] = str(Path(getattr(settings, "UPLOAD_DIR", "uploads")).resolve())

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.debug(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings)
        container = build_container(settings)

    app.extensions["kindergarten"] = container
    register_error_handlers(app)

    @app.before_request
    def _log_request():
        logger.debug("%s %s", request.method, request.path)

    @app.get("/uploads/<path:filename>")
    def uploads(filename: str):
        response = send_from_directory(app.config["UPLOAD_DIR"], filename)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    for register in _CONTROLLERS:
        register(app, container)

    return app
