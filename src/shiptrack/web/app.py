"""
Flask application factory.

create_app wires configuration, the database, the notification dispatcher
and the admin session store into one Flask app. Collaborators are stored on
app.extensions["shiptrack"] and looked up per request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from flask import Flask, jsonify

from shiptrack.services.auth_service import AdminSessionStore
from shiptrack.services.database import configure_database, init_database
from shiptrack.services.email_client import build_email_client
from shiptrack.services.exceptions import (
    AuthenticationError,
    ConcurrentUpdateError,
    DatabaseError,
    NotFoundError,
    TrackingIdCollision,
    ValidationError,
)
from shiptrack.services.notification_service import NotificationDispatcher
from shiptrack.utils.config import Config, get_config, set_config

logger = logging.getLogger(__name__)

EXTENSION_KEY = "shiptrack"


@dataclass
class AppServices:
    """Per-application collaborators used by request handlers."""

    config: Config
    sessions: AdminSessionStore
    dispatcher: NotificationDispatcher


def create_app(
    config: Optional[Config] = None,
    email_client: Any = None,
    configure_db: bool = True,
) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Configuration; defaults to get_config(). Installed as the
            global configuration so service functions see the same settings.
        email_client: Email client override; defaults to Resend or logging
            depending on configuration
        configure_db: If True, point the global engine at config.database_url
            and create tables. Tests that manage the session factory pass False.

    Returns:
        Configured Flask app
    """
    config = config or get_config()
    set_config(config)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["TESTING"] = config.is_testing
    app.json.sort_keys = False

    if configure_db:
        engine = configure_database(config.database_url)
        init_database(engine)

    email_client = email_client or build_email_client(config)
    app.extensions[EXTENSION_KEY] = AppServices(
        config=config,
        sessions=AdminSessionStore.from_config(config),
        dispatcher=NotificationDispatcher.from_config(config, email_client),
    )

    from .routes import api

    app.register_blueprint(api)
    _register_error_handlers(app)

    logger.info(f"{config.app_name} v{config.app_version} app created ({config.environment})")
    return app


def _register_error_handlers(app: Flask) -> None:
    """Map service exceptions to JSON error responses."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({"error": str(error), "details": error.errors}), 400

    @app.errorhandler(AuthenticationError)
    def handle_authentication_error(error):
        return jsonify({"error": str(error)}), 401

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return jsonify({"error": str(error)}), 404

    @app.errorhandler(ConcurrentUpdateError)
    @app.errorhandler(TrackingIdCollision)
    def handle_conflict(error):
        return jsonify({"error": str(error)}), 409

    @app.errorhandler(DatabaseError)
    def handle_database_error(error):
        logger.error(f"Database error: {error}")
        return jsonify({"error": "Internal server error"}), 500
