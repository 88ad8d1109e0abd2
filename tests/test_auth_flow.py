"""Tests covering registration, email verification and login."""

from __future__ import annotations

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from flask.testing import FlaskClient

from models import db
from models.user import User
from utils.timeutils import utcnow

REGISTRATION = {
    "email": "Grace@Example.com ",
    "password": "password123",
    "name": "Grace Hopper",
}


def _register(client: FlaskClient, **overrides):
    return client.post("/api/auth/register", json={**REGISTRATION, **overrides})


def _token_from_mail(message) -> str:
    link = next(word for word in message.text.split() if word.startswith("http"))
    return parse_qs(urlparse(link).query)["token"][0]


def test_register_creates_unverified_user_and_sends_link(app, client, mailer):
    """Registering stores a normalized, unverified user and emails the link."""

    response = _register(client)

    assert response.status_code == 201
    assert response.get_json() == {
        "message": "Registration successful. Please check your email to verify your account."
    }

    with app.app_context():
        user = User.query.filter_by(email="grace@example.com").one()
        assert user.is_email_verified is False
        assert user.password_hash != "password123"
        assert len(user.verification_token) == 64
        remaining = user.verification_token_exp - utcnow()
        assert timedelta(hours=7, minutes=59) < remaining <= timedelta(hours=8)
        token = user.verification_token

    assert len(mailer.outbox) == 1
    message = mailer.outbox[0]
    assert message.to == "grace@example.com"
    assert message.subject == "Verify your email address"
    assert f"http://frontend.test/verify-email?token={token}" in message.text
    assert f"verify-email?token={token}" in message.html


def test_register_rejects_duplicate_email(client, make_user):
    """A second registration for the same address is a conflict."""

    make_user(email="grace@example.com")

    response = _register(client)

    assert response.status_code == 409
    payload = response.get_json()
    assert payload["detail"] == "User with this email already exists"
    assert payload["status_code"] == 409
    assert payload["error"] == "Conflict"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"password": "12345"}, "password"),
        ({"email": "not-an-email"}, "email"),
        ({"name": "   "}, "name"),
        ({"role": "admin"}, "role"),
    ],
)
def test_register_validation(client, mailer, overrides, field):
    """Invalid or unexpected properties are reported per field."""

    response = _register(client, **overrides)

    assert response.status_code == 400
    payload = response.get_json()
    assert field in {item["field"] for item in payload["errors"]}
    assert mailer.outbox == []


def test_register_rolls_back_when_mail_fails(app, client, mailer, monkeypatch):
    """If the verification email cannot be sent the address stays free."""

    from mail import MailDeliveryError

    def _fail(message):
        raise MailDeliveryError("smtp down")

    monkeypatch.setattr(mailer, "send", _fail)

    response = _register(client)

    assert response.status_code == 503
    with app.app_context():
        assert User.query.count() == 0


def test_login_requires_verified_email(client):
    """Users cannot log in before confirming their address."""

    _register(client)

    response = client.post(
        "/api/auth/login",
        json={"email": "grace@example.com", "password": "password123"},
    )

    assert response.status_code == 403
    assert response.get_json()["detail"] == (
        "Email not verified. Please check your email inbox."
    )


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "ada@example.com"}, 400),
        ({"password": "password123"}, 400),
        ({"email": "ada@example.com", "password": "wrong-password"}, 401),
        ({"email": "nobody@example.com", "password": "password123"}, 401),
    ],
)
def test_login_validation(client, make_user, payload, status_code):
    """Login validates the body and never reveals which credential was wrong."""

    make_user()

    response = client.post("/api/auth/login", json=payload)

    assert response.status_code == status_code
    if status_code == 401:
        assert response.get_json()["detail"] == "Invalid credentials"


def test_login_returns_access_token(client, make_user):
    """Verified users receive a JWT and their public profile."""

    user_id = make_user()

    response = client.post(
        "/api/auth/login",
        json={"email": "ADA@example.com", "password": "password123"},
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["access_token"]
    assert data["user"] == {
        "id": user_id,
        "email": "ada@example.com",
        "name": "Ada Lovelace",
    }


def test_verify_email_activates_account_and_logs_in(app, client, mailer):
    """The emailed token activates the account once and returns a session."""

    _register(client)
    token = _token_from_mail(mailer.outbox[0])

    response = client.post("/api/auth/verify-email", json={"token": token})

    assert response.status_code == 200
    data = response.get_json()
    assert data["user"]["email"] == "grace@example.com"

    me = client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert me.status_code == 200
    assert me.get_json()["user"]["name"] == "Grace Hopper"

    with app.app_context():
        user = User.query.filter_by(email="grace@example.com").one()
        assert user.is_email_verified is True
        assert user.verification_token is None
        assert user.verification_token_exp is None

    reused = client.post("/api/auth/verify-email", json={"token": token})
    assert reused.status_code == 400
    assert reused.get_json()["detail"] == "Invalid verification token"

    login = client.post(
        "/api/auth/login",
        json={"email": "grace@example.com", "password": "password123"},
    )
    assert login.status_code == 200


def test_verify_email_rejects_expired_token(app, client, mailer):
    """Tokens past their expiry cannot be exchanged."""

    _register(client)
    token = _token_from_mail(mailer.outbox[0])

    with app.app_context():
        user = User.query.filter_by(verification_token=token).one()
        user.verification_token_exp = utcnow() - timedelta(minutes=1)
        db.session.commit()

    response = client.post("/api/auth/verify-email", json={"token": token})

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Verification token expired"


def test_verify_email_requires_token(client):
    response = client.post("/api/auth/verify-email", json={"token": ""})

    assert response.status_code == 400
    assert response.get_json()["errors"] == [
        {"field": "token", "message": "token should not be empty"}
    ]


def test_me_requires_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    payload = response.get_json()
    assert payload["error"] == "Unauthorized"
    assert payload["path"] == "/api/auth/me"


def test_me_rejects_token_for_deleted_user(app, client, make_user, auth_headers):
    """A valid signature is not enough once the account is gone."""

    user_id = make_user()
    headers = auth_headers(user_id)
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
    assert response.get_json()["detail"] == "User not found"


def test_me_rejects_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401
    assert "request_id" in response.get_json()


def test_me_rejects_expired_token(client, make_user, auth_headers):
    headers = auth_headers(make_user(), expires_delta=timedelta(seconds=-30))

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
    assert response.get_json()["detail"] == "Token has expired"


def test_register_race_on_unique_email_is_a_conflict(client, make_user, mailer, monkeypatch):
    """Losing the insert race to a concurrent registration still answers 409."""

    from services import auth as auth_service

    make_user(email="grace@example.com")
    monkeypatch.setattr(auth_service, "find_user_by_email", lambda email: None)

    response = _register(client)

    assert response.status_code == 409
    assert response.get_json()["detail"] == "User with this email already exists"
    assert mailer.outbox == []
