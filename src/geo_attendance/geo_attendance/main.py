from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_BUSINESS_TIMEZONE, DEFAULT_SCAN_TIMEOUT_SECONDS
from .database.bootstrap import apply_schema
from .scans.admin_controller import register as register_scan_admin
from .scans.controller import register as register_scans
from .sessions.controller import register as register_sessions
from .settings.controller import register as register_settings
from .sites.controller import register as register_sites

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
        container = build_container(
            db_config=db_config,
            timezone_name=getattr(settings, "BUSINESS_TIMEZONE", DEFAULT_BUSINESS_TIMEZONE),
            scan_timeout_seconds=float(getattr(settings, "SCAN_TIMEOUT_SECONDS", DEFAULT_SCAN_TIMEOUT_SECONDS)),
        )
    app.extensions["geo_attendance"] = container

    register_scans(app, container)
    register_scan_admin(app, container)
    register_sessions(app, container)
    register_settings(app, container)
    register_sites(app, container)

    @app.errorhandler(500)
    def internal_error(e):
        logger.error("Unhandled error: %s", getattr(e, "original_exception", e))
        return jsonify({"success": False, "message": "Internal server error."}), 500

    return app
