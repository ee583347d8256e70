from __future__ import annotations

from typing import Any, Mapping, Optional

import click
from flask import Flask, jsonify
from loguru import logger
from werkzeug.exceptions import HTTPException

from .config import load_settings, validate_fallback
from .errors import SantaError
from .extensions import cors, db, login_manager, migrate
from .logging import setup_logging
from .views.auth import auth_bp
from .views.public import public_bp
from .views.santa import santa_bp
from .views.users import users_bp


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)

    app.config.from_mapping(load_settings().to_flask_config())
    if config:
        app.config.from_mapping(config)
    app.config["SANTA_DERANGEMENT_FALLBACK"] = validate_fallback(app.config["SANTA_DERANGEMENT_FALLBACK"])

    setup_logging(app.config["LOG_LEVEL"], app.config.get("LOG_PATH"))

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    # registers the bearer-token request loader
    from . import auth  # noqa: F401

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(santa_bp)

    register_error_handlers(app)
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(SantaError)
    def handle_santa_error(e: SantaError):
        if e.status_code >= 500:
            logger.error("{name}: {message}", name=type(e).__name__, message=e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify(error=e.description), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.opt(exception=e).error("unhandled error")
        return jsonify(error="Server error"), 500


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create any missing tables."""
        db.create_all()
        click.echo("Database tables initialized")
