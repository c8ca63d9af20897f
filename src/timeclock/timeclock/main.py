from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .logging_cfg import configure_logging
from .relay.controller import register as register_relay
from .tracker.controller import register as register_tracker


def create_app(container: Optional[Container] = None, *, settings=None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = settings or load_settings()
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(app, level=logging.getLevelName(str(getattr(settings, "LOG_LEVEL", "INFO")).upper()))
    app.logger.info("settings=%s", get_settings_module())

    db_config = getattr(settings, "DB_CONFIG", {})
    if getattr(settings, "DB_ENABLED", False) and getattr(settings, "AUTO_INIT_DB", False):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    if container is None:
        container = build_container(settings)
    container.tracker_service.start()

    register_tracker(app, container)
    register_relay(app, container)

    app.extensions["timeclock"] = container
    return app
