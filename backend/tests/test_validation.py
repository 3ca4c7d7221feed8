# tests/test_validation.py

import pytest

from students_api.services.validation import (
    EMAIL_MESSAGE, NAME_MESSAGE, PHONE_MESSAGE, FieldError, validate_student
)


def test_valid_payload_is_normalized(valid_payload):
    result = validate_student(valid_payload)

    assert result.is_valid
    assert result.errors == []
    assert result.record == valid_payload


def test_name_is_trimmed():
    result = validate_student({"name": "   Ann Lee  "})

    assert result.record["name"] == "Ann Lee"


def test_missing_optional_fields_default_to_empty_string():
    result = validate_student({"name": "Ann Lee", "email": None, "phone": ""})

    assert result.record == {
        "name": "Ann Lee",
        "address": "",
        "city": "",
        "state": "",
        "email": "",
        "phone": "",
    }


@pytest.mark.parametrize("name", ["Jo", "  Jo  ", "", "     ", None])
def test_short_name_yields_single_name_error(name):
    result = validate_student({"name": name})

    assert result.record is None
    assert len(result.errors) == 1
    assert result.errors[0].field == "name"
    assert result.errors[0].message == NAME_MESSAGE


def test_missing_name_is_an_error():
    result = validate_student({"email": "x@example.com"})

    assert [e.field for e in result.errors] == ["name"]


def test_all_violations_reported_together():
    result = validate_student({"name": "Al", "email": "nope", "phone": "12"})

    assert [(e.field, e.message) for e in result.errors] == [
        ("name", NAME_MESSAGE),
        ("email", EMAIL_MESSAGE),
        ("phone", PHONE_MESSAGE),
    ]
    assert result.record is None


@pytest.mark.parametrize("email", [
    "plainaddress",
    "missing-domain@",
    "@example.com",
    "two words@example.com",
    "x@example",
    "a@@example.com",
])
def test_invalid_email_rejected(email):
    result = validate_student({"name": "Ann Lee", "email": email})

    assert [e.field for e in result.errors] == ["email"]
    assert result.errors[0].message == EMAIL_MESSAGE


@pytest.mark.parametrize("email", ["x@example.com", "first.last+tag@mail.example.org"])
def test_valid_email_accepted(email):
    result = validate_student({"name": "Ann Lee", "email": email})

    assert result.is_valid
    assert result.record["email"] == email


@pytest.mark.parametrize("phone, ok", [
    ("123456", False),
    ("1234567", True),
    ("9" * 15, True),
    ("9" * 16, False),
    ("555-1234", False),
    ("12345a7", False),
    ("+15551234567", False),
])
def test_phone_rules(phone, ok):
    result = validate_student({"name": "Ann Lee", "phone": phone})

    assert result.is_valid is ok
    if not ok:
        assert result.errors[0].message == PHONE_MESSAGE


def test_address_city_state_accept_any_string():
    result = validate_student({"name": "Ann Lee", "address": "#@!", "city": "  ", "state": "x"})

    assert result.is_valid
    assert result.record["address"] == "#@!"
    assert result.record["city"] == "  "


def test_field_error_to_dict():
    error = FieldError("name", NAME_MESSAGE, "Jo")

    assert error.to_dict() == {
        "type": "field",
        "msg": NAME_MESSAGE,
        "path": "name",
        "location": "body",
        "value": "Jo",
    }
