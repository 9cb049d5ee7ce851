from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_config import configure_logging
from .container import Container, build_container
from .core.constants import TOKEN_TTL_SECONDS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .geofence.controller import register as register_campuses
from .roster.controller import register as register_roster
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ALLOW_DEV_MODE"] = bool(getattr(settings, "ALLOW_DEV_MODE", False))
    app.config["TOKEN_TTL_SECONDS"] = int(getattr(settings, "TOKEN_TTL_SECONDS", TOKEN_TTL_SECONDS))

    log_file = None if app.config["DEBUG"] else getattr(settings, "LOG_FILE", None)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), log_file=log_file)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            allow_dev_mode=app.config["ALLOW_DEV_MODE"],
            token_ttl_seconds=app.config["TOKEN_TTL_SECONDS"],
        )

    if app.config["ALLOW_DEV_MODE"]:
        logger.warning("dev mode is allowed: geofence checks can be bypassed per request")

    register_users(app, container)
    register_attendance(app, container)
    register_roster(app, container)
    register_campuses(app, container)

    return app
