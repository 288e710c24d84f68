"""Client-side precondition checks shared by the rental HTTP clients.

Every check runs before any network call and raises `ValidationError` with
structured `field_errors`, so a caller can highlight the offending field.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from src.integrations.policy.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _strip(v: Any) -> str:
    return "" if v is None else str(v).strip()


def require_positive_id(value: Any, field: str, *, label: Optional[str] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(
            f"A valid {label or field} is required.",
            field_errors={field: "must be a positive integer"},
        )
    return value


def require_text(value: Any, field: str, message: str) -> str:
    text = _strip(value)
    if not text:
        raise ValidationError(message, field_errors={field: "required"})
    return text


def require_email(value: Any, *, check_format: bool = False) -> str:
    email = require_text(value, "email", "An email address is required to send the verification code.")
    if check_format and not EMAIL_PATTERN.match(email):
        raise ValidationError(
            f"{email!r} does not look like an email address.",
            field_errors={"email": "invalid format"},
        )
    return email


def require_pin(value: Any, *, subject: str) -> str:
    return require_text(value, "pinCode", f"A verification code is required to sign the {subject}.")
