"""Standard JSON error envelope shared by every API error path."""

from __future__ import annotations

import traceback
import uuid
from http import HTTPStatus

from flask import current_app, g, jsonify, request

from utils.timeutils import isoformat_utc, utcnow


def get_request_id() -> str:
    request_id = g.get("request_id")
    if not request_id:
        request_id = (
            request.headers.get("X-Correlation-ID")
            or request.headers.get("X-Request-ID")
            or str(uuid.uuid4())
        )
        g.request_id = request_id
    return request_id


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def build_error_payload(
    status_code: int,
    detail: str,
    *,
    error: str | None = None,
    errors: list[dict] | None = None,
    exc: BaseException | None = None,
) -> dict:
    payload = {
        "status_code": status_code,
        "error": error or _status_phrase(status_code),
        "detail": detail,
        "timestamp": isoformat_utc(utcnow()),
        "path": request.path,
        "request_id": get_request_id(),
    }
    if errors:
        payload["errors"] = errors
    if exc is not None and current_app.config.get("EXPOSE_STACK_TRACES"):
        payload["stack"] = "".join(traceback.format_exception(exc))
    return payload


def log_error(status_code: int, detail: str, exc: BaseException | None = None) -> None:
    """Log 5xx responses as errors with traceback and 4xx as warnings."""

    message = "[%s] %s %s - %s %s"
    args = (get_request_id(), request.method, request.path, status_code, detail)
    if status_code >= 500:
        current_app.logger.error(message, *args, exc_info=exc)
    elif status_code >= 400:
        current_app.logger.warning(message, *args)


def json_error(
    status_code: int,
    detail: str,
    *,
    error: str | None = None,
    errors: list[dict] | None = None,
    exc: BaseException | None = None,
):
    """Return a JSON response carrying the error envelope."""

    log_error(status_code, detail, exc)
    payload = build_error_payload(
        status_code, detail, error=error, errors=errors, exc=exc
    )
    response = jsonify(payload)
    response.status_code = status_code
    response.headers.setdefault("X-Request-ID", payload["request_id"])
    return response
