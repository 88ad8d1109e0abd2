"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from flask import Request
from werkzeug.exceptions import BadRequest

from utils.timeutils import parse_iso8601

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RequestValidationError(BadRequest):
    """400 error carrying field-level validation messages."""

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        super().__init__("; ".join(item["message"] for item in errors))


@dataclass(frozen=True)
class Field:
    """Declarative rule for a single body property.

    ``kind`` is one of ``"string"``, ``"email"`` or ``"datetime"``.
    """

    kind: str = "string"
    required: bool = True
    min_length: int | None = None
    max_length: int | None = None

    def clean(self, name: str, value: Any) -> tuple[Any, list[str]]:
        if not isinstance(value, str):
            return None, [f"{name} must be a string"]
        if not value.strip():
            return None, [f"{name} should not be empty"]

        if self.kind == "email":
            value = value.strip().lower()
            if not _EMAIL_RE.match(value):
                return None, [f"{name} must be an email"]
        elif self.kind == "datetime":
            try:
                return parse_iso8601(value), []
            except ValueError:
                return None, [f"{name} must be a valid ISO 8601 date string"]

        messages = []
        if self.min_length is not None and len(value) < self.min_length:
            messages.append(
                f"{name} must be longer than or equal to {self.min_length} characters"
            )
        if self.max_length is not None and len(value) > self.max_length:
            messages.append(
                f"{name} must be shorter than or equal to {self.max_length} characters"
            )
        return value, messages


def parse_json_request(req: Request) -> dict:
    """Return the parsed JSON object body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    return data


def validate_payload(
    data: Mapping[str, Any],
    schema: Mapping[str, Field],
    *,
    partial: bool = False,
) -> dict:
    """Validate ``data`` against ``schema`` and return the cleaned values.

    Properties not declared in the schema are rejected. With ``partial`` set,
    absent fields are skipped instead of reported, which is how update
    bodies are checked.
    """

    errors: list[dict[str, str]] = []
    cleaned: dict[str, Any] = {}

    for name in data:
        if name not in schema:
            errors.append({"field": name, "message": f"property {name} should not exist"})

    for name, rule in schema.items():
        if name not in data or data[name] is None:
            if rule.required and not partial:
                errors.append({"field": name, "message": f"{name} should not be empty"})
            continue
        value, messages = rule.clean(name, data[name])
        if messages:
            errors.extend({"field": name, "message": message} for message in messages)
        else:
            cleaned[name] = value

    if errors:
        raise RequestValidationError(errors)
    return cleaned
