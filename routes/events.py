"""Events blueprint: CRUD over the authenticated user's events."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from services import events as event_service
from utils.request_validation import parse_json_request

events_bp = Blueprint("events", __name__)


@events_bp.before_request
@jwt_required()
def _require_jwt():
    """Every events route needs a bearer token for an existing user."""


@events_bp.route("", methods=["POST"])
def create_event():
    data = parse_json_request(request)
    event = event_service.create_event(current_user.id, data)
    return jsonify(event.to_dict()), HTTPStatus.CREATED


@events_bp.route("", methods=["GET"])
def list_events():
    """Return the current user's events ordered by date."""

    events = event_service.list_events(current_user.id)
    return jsonify([event.to_dict() for event in events])


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str):
    event = event_service.get_event(event_id, current_user.id)
    return jsonify(event.to_dict())


@events_bp.route("/<event_id>", methods=["PATCH"])
def update_event(event_id: str):
    data = parse_json_request(request)
    event = event_service.update_event(event_id, current_user.id, data)
    return jsonify(event.to_dict())


@events_bp.route("/<event_id>", methods=["DELETE"])
def delete_event(event_id: str):
    event_service.delete_event(event_id, current_user.id)
    return jsonify({"message": "Event successfully deleted"})
