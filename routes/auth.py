"""Authentication blueprint providing register, verify-email and login endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from services import auth as auth_service
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new user and send the email verification link."""
    payload = parse_json_request(request)
    auth_service.register_user(payload)

    return (
        jsonify({"message": auth_service.REGISTERED_MESSAGE}),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a verified user and return a JWT access token."""
    payload = parse_json_request(request)
    user = auth_service.authenticate(payload)

    return jsonify(auth_service.session_payload(user)), HTTPStatus.OK


@auth_bp.route("/verify-email", methods=["POST"])
def verify_email() -> tuple:
    """Consume a verification token and log the user in."""
    payload = parse_json_request(request)
    user = auth_service.verify_email(payload)

    return jsonify(auth_service.session_payload(user)), HTTPStatus.OK


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me() -> tuple:
    return jsonify({"user": current_user.to_dict()}), HTTPStatus.OK
