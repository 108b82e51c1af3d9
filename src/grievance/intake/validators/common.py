"""Built-in validators for common field types."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

# Registry of validator functions: name -> callable(value, **params) -> str | None
# Returns an error message string on failure, None on success.
VALIDATORS: dict[str, Any] = {}

_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9\-]+(\.[a-zA-Z0-9\-]+)*\.[a-zA-Z]{2,}")
# Indian mobile numbers: ten digits, leading digit 6-9.
_MOBILE_PATTERN = re.compile(r"[6-9]\d{9}")


def register(name: str):
    """Decorator to register a validator function."""
    def decorator(fn):
        VALIDATORS[name] = fn
        return fn
    return decorator


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def parse_iso_date(value: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` calendar date, or return None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


@register("required")
def validate_required(value: Any, **_kwargs: Any) -> str | None:
    if _blank(value):
        return "This field is required."
    return None


@register("email")
def validate_email(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not _EMAIL_PATTERN.fullmatch(value.strip()):
        return "Please enter a valid email address."
    return None


@register("phone")
def validate_phone(value: Any, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        return None
    if not _MOBILE_PATTERN.fullmatch(value.strip()):
        return "Please enter a valid 10-digit mobile number."
    return None


@register("date")
def validate_date(value: Any, **_kwargs: Any) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if parse_iso_date(value) is None:
        return "Please enter a valid date in YYYY-MM-DD format."
    return None


@register("not_future")
def validate_not_future(value: Any, today: date | None = None, **_kwargs: Any) -> str | None:
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    if parsed > (today or date.today()):
        return "Date cannot be in the future."
    return None


@register("min_length")
def validate_min_length(value: Any, min_chars: int | str = 0, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str):
        return None
    if len(value) < int(min_chars):
        return f"Must be at least {min_chars} characters."
    return None


@register("choice")
def validate_choice(value: Any, options: list[str] | None = None, **_kwargs: Any) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if options and value not in options:
        return "Please select one of the listed options."
    return None


@register("accepted")
def validate_accepted(value: Any, **_kwargs: Any) -> str | None:
    if value is not True:
        return "This box must be checked."
    return None
