"""Application factory."""

import logging
import os
import uuid

from flask import Flask, g, jsonify, render_template, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config, validate_config
from mail import init_mailer
from models import db
from models.user import User
from routes.auth import auth_bp
from routes.events import events_bp
from routes.web import web_bp
from utils.error_response import get_request_id, json_error
from utils.timeutils import isoformat_utc, utcnow

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; img-src 'self' data: https:"
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
}


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    validate_config(app.config)
    _configure_logging(app)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    init_mailer(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "100 per 15 minutes")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    api_prefix = "/" + app.config["API_PREFIX"]
    app.register_blueprint(auth_bp, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(events_bp, url_prefix=f"{api_prefix}/events")
    app.register_blueprint(web_bp)

    @app.route(api_prefix, methods=["GET"])
    @limiter.exempt
    def api_root():
        app.logger.debug("GET %s endpoint called", api_prefix)
        return jsonify(
            {
                "message": "Hello API",
                "environment": "Running in {} mode on port {}".format(
                    app.config["APP_ENV"], app.config["PORT"]
                ),
            }
        )

    # Health
    @app.route(f"{api_prefix}/health", methods=["GET"])
    @limiter.exempt
    def health_check():
        return jsonify({"status": "ok", "timestamp": isoformat_utc(utcnow())})

    _register_security_headers(app)
    _register_error_handlers(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def _is_api_request(app: Flask) -> bool:
    api_prefix = "/" + app.config["API_PREFIX"]
    return request.path == api_prefix or request.path.startswith(api_prefix + "/")


def _register_security_headers(app: Flask) -> None:
    @app.after_request
    def _add_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


@jwt.user_lookup_loader
def _load_user(_jwt_header, jwt_data):
    return db.session.get(User, jwt_data["sub"])


@jwt.user_lookup_error_loader
def _user_not_found(_jwt_header, _jwt_data):
    return json_error(401, "User not found")


@jwt.unauthorized_loader
def _missing_token(reason: str):
    return json_error(401, reason)


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return json_error(401, reason)


@jwt.expired_token_loader
def _expired_token(_jwt_header, _jwt_data):
    return json_error(401, "Token has expired")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():
        g.request_id = None
        get_request_id()

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        if not _is_api_request(app):
            return (
                render_template(
                    "errors.html",
                    status_code=error.code,
                    title=error.name,
                    detail=error.description,
                ),
                error.code,
            )
        response = json_error(
            error.code or 500,
            error.description,
            error=error.name,
            errors=getattr(error, "errors", None),
            exc=error,
        )
        # Keep headers such as Retry-After and Allow from the original error.
        for header, value in error.get_headers():
            if header.lower() != "content-type":
                response.headers.setdefault(header, value)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if not _is_api_request(app):
            app.logger.exception("Unhandled application error", exc_info=error)
            return (
                render_template(
                    "errors.html",
                    status_code=500,
                    title="Internal Server Error",
                    detail="An unexpected error occurred.",
                ),
                500,
            )
        return json_error(500, "An unexpected error occurred.", exc=error)


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
