"""
Field validation for student payloads.

Rules are evaluated independently and every violation is reported, in the
order name, email, phone:
- name: trimmed, at least 3 characters
- email: optional; when non-empty must be a syntactically valid address
- phone: optional; when non-empty must be 7-15 ASCII digits
address, city and state accept any string.

Empty strings and None count as "absent" for the optional fields, and absent
fields normalize to "".
"""

import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from email_validator import EmailNotValidError, validate_email

NAME_MIN_LENGTH = 3
PHONE_PATTERN = re.compile(r"[0-9]{7,15}")

NAME_MESSAGE = "Name minimum 3 characters"
EMAIL_MESSAGE = "Invalid email"
PHONE_MESSAGE = "Phone: 7-15 digits"


@dataclass
class FieldError:
    field: str
    message: str
    value: object = None

    def to_dict(self) -> dict:
        """Error entry as returned in 422 bodies."""
        return {
            "type": "field",
            "msg": self.message,
            "path": self.field,
            "location": "body",
            "value": self.value,
        }


@dataclass
class ValidationResult:
    """Exactly one of `record` / `errors` is populated."""
    record: Optional[dict] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_phone(value: str) -> bool:
    return PHONE_PATTERN.fullmatch(value) is not None


def validate_student(payload: Mapping) -> ValidationResult:
    """Validate a raw field map and return the normalized record or the errors."""
    errors = []

    raw_name = payload.get("name")
    name = (raw_name or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        errors.append(FieldError("name", NAME_MESSAGE, raw_name))

    email = payload.get("email") or ""
    if email and not is_valid_email(email):
        errors.append(FieldError("email", EMAIL_MESSAGE, email))

    phone = payload.get("phone") or ""
    if phone and not is_valid_phone(phone):
        errors.append(FieldError("phone", PHONE_MESSAGE, phone))

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(record={
        "name": name,
        "address": payload.get("address") or "",
        "city": payload.get("city") or "",
        "state": payload.get("state") or "",
        "email": email,
        "phone": phone,
    })
