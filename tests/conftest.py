"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from mail import ConsoleMailer  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAIL_BACKEND = "console"
    EXPOSE_STACK_TRACES = False
    FRONTEND_URL = "http://frontend.test"
    CORS_ORIGINS = ["http://localhost:3000"]
    RATE_LIMIT = "100 per 15 minutes"


def build_app(**overrides) -> Flask:
    """Create an app from ``TestConfig`` with per-test overrides."""

    config_class = type("OverriddenTestConfig", (TestConfig,), dict(overrides))
    return create_app(config_class)


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def mailer(app: Flask) -> ConsoleMailer:
    """The console mail backend collecting outgoing messages."""

    return app.extensions["mailer"]


@pytest.fixture()
def make_user(app: Flask):
    """Persist a user and return its id."""

    def _make_user(
        email: str = "ada@example.com",
        password: str = "password123",
        name: str = "Ada Lovelace",
        *,
        verified: bool = True,
    ) -> str:
        with app.app_context():
            user = User(email=email, name=name, is_email_verified=verified)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture()
def auth_headers(app: Flask):
    """Build an Authorization header for a user id."""

    from flask_jwt_extended import create_access_token

    def _auth_headers(user_id: str, expires_delta=None) -> dict[str, str]:
        with app.app_context():
            token = create_access_token(identity=user_id, expires_delta=expires_delta)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
