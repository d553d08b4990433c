from __future__ import annotations

import importlib
import logging
from typing import Optional

import click
from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema
from .sales.controller import register as register_sales
from .settings.controller import register as register_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)

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
        container = build_container(db_config=db_config, timezone=getattr(settings, "TIMEZONE", None))
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)

    register_error_handlers(app)
    register_attendance(app, container)
    register_sales(app, container)
    register_settings(app, container)

    @app.cli.command("init-db")
    def init_db_command():
        """Apply schema.sql to the configured database."""
        if container.conn is None:
            raise click.ClickException("No database connection configured")
        count = apply_schema(container.conn)
        click.echo(f"OK: applied schema.sql to {container.conn.config.database} ({count} statements)")

    return app
