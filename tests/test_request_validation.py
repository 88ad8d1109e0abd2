"""Tests for request body validation helpers."""

from __future__ import annotations

from datetime import datetime

import pytest

from utils.request_validation import Field, RequestValidationError, validate_payload

SCHEMA = {
    "email": Field("email"),
    "password": Field(min_length=6),
    "when": Field("datetime", required=False),
}


def test_cleans_valid_payload():
    data = validate_payload(
        {"email": " Ada@Example.COM", "password": "secret1", "when": "2025-12-20T10:00:00Z"},
        SCHEMA,
    )

    assert data == {
        "email": "ada@example.com",
        "password": "secret1",
        "when": datetime(2025, 12, 20, 10, 0),
    }


def test_collects_every_error():
    with pytest.raises(RequestValidationError) as excinfo:
        validate_payload({"email": "nope", "password": "123", "extra": 1}, SCHEMA)

    error = excinfo.value
    assert error.code == 400
    assert error.errors == [
        {"field": "extra", "message": "property extra should not exist"},
        {"field": "email", "message": "email must be an email"},
        {
            "field": "password",
            "message": "password must be longer than or equal to 6 characters",
        },
    ]
    assert "email must be an email" in error.description


def test_missing_required_fields():
    with pytest.raises(RequestValidationError) as excinfo:
        validate_payload({}, SCHEMA)

    assert [item["field"] for item in excinfo.value.errors] == ["email", "password"]


def test_partial_skips_absent_fields():
    assert validate_payload({"password": "longenough"}, SCHEMA, partial=True) == {
        "password": "longenough"
    }


@pytest.mark.parametrize("value", ["", "   ", 12, ["a"]])
def test_rejects_empty_and_non_string_values(value):
    with pytest.raises(RequestValidationError):
        validate_payload({"email": "a@b.co", "password": value}, SCHEMA)


def test_rejects_bad_datetime():
    with pytest.raises(RequestValidationError) as excinfo:
        validate_payload(
            {"email": "a@b.co", "password": "secret1", "when": "31/12/2025"}, SCHEMA
        )

    assert excinfo.value.errors[0]["message"] == (
        "when must be a valid ISO 8601 date string"
    )
