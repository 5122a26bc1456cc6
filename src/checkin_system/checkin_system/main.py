from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .analytics.controller import register as register_analytics
from .attendees.controller import register as register_attendees
from .badges.controller import register as register_badges
from .checkins.controller import register as register_checkins
from .container import Container, build_container
from .core.enums import StoreBackend
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_attendees, list_tables
from .events.controller import register as register_events
from .health.controller import register as register_health
from .web.errors import register_error_handlers

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), log_file=getattr(settings, "LOG_FILE", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ALLOWED_ORIGINS"] = tuple(getattr(settings, "ALLOWED_ORIGINS", ()))
    app.config["REQUIRE_CSRF"] = bool(getattr(settings, "REQUIRE_CSRF", False))
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # image uploads

    if container is None:
        container = _build_from_settings(settings, settings_module)

    register_error_handlers(app)
    register_health(app, container)
    register_events(app, container)
    register_attendees(app, container)
    register_checkins(app, container)
    register_badges(app, container)
    register_analytics(app, container)

    app.extensions["checkin_container"] = container
    return app


def _build_from_settings(settings, settings_module: str) -> Container:
    backend = StoreBackend(getattr(settings, "STORE_BACKEND", StoreBackend.MYSQL.value))
    db_config = getattr(settings, "DB_CONFIG")
    logger.info("Starting with settings=%s backend=%s", settings_module, backend.value)

    container = build_container(
        db_config=db_config,
        backend=backend,
        badge_print_template=getattr(settings, "BADGE_PRINT_TEMPLATE", "TPL_A6_V1"),
        app_version=getattr(settings, "APP_VERSION", "1.0.0"),
        environment=getattr(settings, "ENVIRONMENT", "development"),
    )

    if backend != StoreBackend.MYSQL:
        return container
    logger.info("MySQL target: %s", container.conn.config.describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_attendees(db_config, generate_badge_uid=container.badge_generator.generate)
        logger.info("Demo seed ready")
    return container
