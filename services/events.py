"""Ownership-scoped event CRUD."""

from __future__ import annotations

from typing import Any, Mapping

from flask import current_app
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import db
from models.event import Event
from utils.request_validation import Field, validate_payload

EVENT_FIELDS = {
    "title": Field(max_length=200),
    "members": Field(),
    "messages": Field(),
    "datetime": Field("datetime"),
}


def list_events(user_id: str) -> list[Event]:
    """Return the user's events, earliest first."""

    return (
        Event.query.filter_by(user_id=user_id)
        .order_by(Event.datetime.asc(), Event.created_at.asc())
        .all()
    )


def get_event(event_id: str, user_id: str) -> Event:
    event = db.session.get(Event, event_id)
    if event is None:
        raise NotFound(f"Event with ID {event_id} not found")
    if not event.is_owned_by(user_id):
        raise Forbidden("You do not have permission to access this event")
    return event


def create_event(user_id: str, payload: Mapping[str, Any]) -> Event:
    data = validate_payload(payload, EVENT_FIELDS)
    event = Event(user_id=user_id, **data)
    db.session.add(event)
    db.session.commit()
    current_app.logger.info("User %s created event %s", user_id, event.id)
    return event


def update_event(event_id: str, user_id: str, payload: Mapping[str, Any]) -> Event:
    event = get_event(event_id, user_id)
    if not payload:
        raise BadRequest("Request JSON body must not be empty.")

    data = validate_payload(payload, EVENT_FIELDS, partial=True)
    for field, value in data.items():
        setattr(event, field, value)
    db.session.commit()
    return event


def delete_event(event_id: str, user_id: str) -> None:
    event = get_event(event_id, user_id)
    db.session.delete(event)
    db.session.commit()
    current_app.logger.info("User %s deleted event %s", user_id, event_id)
