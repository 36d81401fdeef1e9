import atexit
import logging

import click
from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import get_config
from .errors import register_error_handlers
from .logging_config import setup_logging
from models import storage  # DBStorage singleton (scoped_session)
from services import SessionManager, UserService

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Prompt Studio API",
        "version": "1.0.0",
        "description": "Accounts and sessions for Prompt Studio: registration, login, token refresh and logout.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Each call rebinds the storage engine to the configured DATABASE_URL,
    so tests can build an isolated app on in-memory SQLite.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    setup_logging(app.config["LOG_LEVEL"])

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    # Services are built from config so the signing secret is injected, not global
    app.extensions["session_manager"] = SessionManager.from_config(app.config, storage)
    app.extensions["user_service"] = UserService(storage)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    # Rate limiting: every /api/v1 route, keyed by client address
    limiter = Limiter(get_remote_address, app=app)
    api_limit = "{} per {} minutes".format(
        app.config["RATE_LIMIT_MAX_REQUESTS"], app.config["RATE_LIMIT_WINDOW_MINUTES"]
    )

    for bp in (health_bp, auth_bp, users_bp):
        limiter.limit(api_limit)(bp)
        app.register_blueprint(bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.cli.command("cleanup-tokens")
    def cleanup_tokens_command():
        """Delete expired and revoked refresh tokens."""
        deleted = app.extensions["session_manager"].cleanup_expired_tokens()
        click.echo(f"Deleted {deleted} refresh token(s)")

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Prompt Studio API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    interval = app.config.get("TOKEN_CLEANUP_INTERVAL_MINUTES", 0)
    if interval > 0 and not app.testing:
        from .scheduler import start_scheduler, shutdown_scheduler

        start_scheduler(app, interval)
        atexit.register(shutdown_scheduler)

    logger.info("Prompt Studio API created (env=%s)", app.config.get("APP_ENV"))
    return app
