"""Input sanitization and normalization utilities."""

import re
from typing import Any, Iterable, Optional
import bleach


# Maximum lengths for different field types
MAX_LENGTHS = {
    "name": 255,
    "email": 255,
    "password": 128,
    "description": 2000,
    "default": 255,
}

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def sanitize_string(
    value: str,
    max_length: int = MAX_LENGTHS["default"],
    strip_html: bool = True,
    allow_newlines: bool = False,
) -> str:
    """
    Sanitize a string input.

    - Strips leading/trailing whitespace
    - Removes HTML tags
    - Truncates to max length
    - Optionally collapses newlines
    """
    if not value:
        return ""

    value = value.strip()

    if strip_html:
        value = bleach.clean(value, tags=[], strip=True)

    if not allow_newlines:
        value = " ".join(value.split())

    if len(value) > max_length:
        value = value[:max_length]

    return value


def sanitize_name(value: str) -> str:
    """Sanitize a person name or a short label."""
    return sanitize_string(value, max_length=MAX_LENGTHS["name"])


def sanitize_email(value: str) -> str:
    """Sanitize and lower-case an email address."""
    return sanitize_string(value, max_length=MAX_LENGTHS["email"]).lower()


def validate_email(value: str) -> bool:
    """Validate email format."""
    if not value or len(value) > MAX_LENGTHS["email"]:
        return False
    return bool(EMAIL_PATTERN.match(value))


def sanitize_description(value: str) -> str:
    """Sanitize a free-text field (allows newlines)."""
    return sanitize_string(
        value,
        max_length=MAX_LENGTHS["description"],
        allow_newlines=True,
    )


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def blank_to_none(value: Any) -> Optional[Any]:
    """Map an empty form value to None so it is stored as an absent value."""
    return None if is_blank(value) else value


def falsy_to_none(value: Any) -> Optional[Any]:
    """Map any falsy form value (empty string, 0, False) to None."""
    return value if value else None


def normalize_optional(row: dict, fields: Iterable[str], falsy: Iterable[str] = ()) -> dict:
    """Return a copy of row with optional fields normalized to None."""
    falsy = set(falsy)
    normalized = dict(row)
    for field in fields:
        if field not in normalized:
            continue
        if field in falsy:
            normalized[field] = falsy_to_none(normalized[field])
        else:
            normalized[field] = blank_to_none(normalized[field])
    return normalized
