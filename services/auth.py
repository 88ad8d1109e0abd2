"""Registration, email verification and login."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping

from flask import current_app, render_template
from flask_jwt_extended import create_access_token
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden,
    ServiceUnavailable,
    Unauthorized,
)

from mail import MailDeliveryError, MailMessage, get_mailer
from models import db
from models.user import User
from utils.request_validation import Field, validate_payload

REGISTER_FIELDS = {
    "email": Field("email"),
    "password": Field(min_length=6),
    "name": Field(max_length=120),
}
LOGIN_FIELDS = {
    "email": Field("email"),
    "password": Field(),
}
VERIFY_EMAIL_FIELDS = {
    "token": Field(),
}

REGISTERED_MESSAGE = (
    "Registration successful. Please check your email to verify your account."
)
DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


def find_user_by_email(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email.strip().lower()).first()


def issue_access_token(user: User) -> str:
    return create_access_token(identity=user.id, additional_claims={"email": user.email})


def session_payload(user: User) -> dict:
    """Body returned after a successful login or verification."""

    return {"user": user.to_dict(), "access_token": issue_access_token(user)}


def send_verification_email(user: User, token: str) -> str:
    link = f"{current_app.config['FRONTEND_URL']}/verify-email?token={token}"
    ttl_hours = current_app.config["VERIFICATION_TOKEN_TTL_HOURS"]
    message = MailMessage(
        to=user.email,
        subject="Verify your email address",
        text=render_template(
            "email/verify_email.txt", user=user, link=link, ttl_hours=ttl_hours
        ),
        html=render_template(
            "email/verify_email.html", user=user, link=link, ttl_hours=ttl_hours
        ),
    )
    return get_mailer().send(message)


def _persist_new_user(step) -> None:
    """Run a flush or commit, turning a lost race on the unique email into 409."""

    try:
        step()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict(DUPLICATE_EMAIL_MESSAGE) from exc


def register_user(payload: Mapping[str, Any]) -> User:
    """Create an unverified account and email its verification link.

    Raises ``Conflict`` for a taken address and ``ServiceUnavailable`` when
    the verification email cannot be sent; in that case nothing is stored.
    """

    data = validate_payload(payload, REGISTER_FIELDS)
    if find_user_by_email(data["email"]) is not None:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE)

    user = User(email=data["email"], name=data["name"].strip(), is_email_verified=False)
    user.set_password(data["password"])
    token = user.issue_verification_token(
        timedelta(hours=current_app.config["VERIFICATION_TOKEN_TTL_HOURS"])
    )
    db.session.add(user)
    _persist_new_user(db.session.flush)

    try:
        send_verification_email(user, token)
    except MailDeliveryError as exc:
        db.session.rollback()
        current_app.logger.error("Verification email failed for %s: %s", data["email"], exc)
        raise ServiceUnavailable(
            "Unable to send verification email. Please try again later."
        ) from exc

    _persist_new_user(db.session.commit)
    current_app.logger.info("Registered user %s (%s)", user.id, user.email)
    return user


def authenticate(payload: Mapping[str, Any]) -> User:
    data = validate_payload(payload, LOGIN_FIELDS)

    user = find_user_by_email(data["email"])
    if user is None or not user.check_password(data["password"]):
        current_app.logger.warning("Failed login for %s", data["email"])
        raise Unauthorized("Invalid credentials")

    if not user.is_email_verified:
        raise Forbidden("Email not verified. Please check your email inbox.")

    current_app.logger.info("User %s logged in", user.id)
    return user


def verify_email(payload: Mapping[str, Any]) -> User:
    """Exchange a verification token for an activated account."""

    data = validate_payload(payload, VERIFY_EMAIL_FIELDS)

    user = User.query.filter_by(verification_token=data["token"]).first()
    if user is None:
        raise BadRequest("Invalid verification token")

    if user.verification_expired():
        raise BadRequest("Verification token expired")

    user.mark_email_verified()
    db.session.commit()
    current_app.logger.info("Verified email for user %s", user.id)
    return user
