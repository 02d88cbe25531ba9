"""Parameter checks run before any request is sent to Lava.

Every helper raises :class:`~lava_cli.errors.LavaError` with
``kind="local"`` on failure so callers still deal with a single error type.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import urlparse

from lava_cli.errors import KIND_LOCAL, LavaError


def _fail(message: str) -> None:
    raise LavaError(message, kind=KIND_LOCAL)


def require_str(name: str, value: Any) -> None:
    """Ensure *value* is a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        _fail(f"{name} is required and must be a non-empty string")


def optional_str(name: str, value: Any) -> None:
    """Ensure *value* is a string when it is set."""
    if value is not None and not isinstance(value, str):
        _fail(f"{name} must be a string")


def require_amount(name: str, value: Any) -> None:
    """Ensure *value* is a positive number.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _fail(f"{name} must be a number")
    if value <= 0:
        _fail(f"{name} must be greater than zero")


def optional_bool(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, bool):
        _fail(f"{name} must be a boolean")


def optional_int(name: str, value: Any, *, minimum: int = 0) -> None:
    """Ensure *value* is an integer no smaller than *minimum* when set."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(f"{name} must be an integer")
    if value < minimum:
        _fail(f"{name} must be >= {minimum}")


def optional_url(name: str, value: Any) -> None:
    """Ensure *value* is an absolute http(s) URL when set."""
    if value is None:
        return
    require_url(name, value)


def require_url(name: str, value: Any) -> None:
    require_str(name, value)
    parsed = urlparse(value.strip())
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        _fail(f"{name} must be an http:// or https:// URL")


def optional_custom_fields(name: str, value: Any) -> None:
    """Ensure *value* is a list of lists of strings when set."""
    if value is None:
        return
    if not isinstance(value, (list, tuple)):
        _fail(f"{name} must be a list of string lists")
    for row in value:
        if not isinstance(row, (list, tuple)) or not all(isinstance(item, str) for item in row):
            _fail(f"{name} must be a list of string lists")


def optional_period(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, (str, date)):
        _fail(f"{name} must be a datetime, date or ISO-8601 string")


def check_period_order(start: Any, end: Any) -> None:
    """Ensure *start* is not after *end* when both are date objects."""
    if not isinstance(start, date) or not isinstance(end, date):
        return
    if _as_utc(start) > _as_utc(end):
        _fail("period_start must not be after period_end")


def _as_utc(value: date) -> datetime:
    """Normalise a date or datetime to an aware UTC datetime."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Any) -> Any:
    """Serialise a period bound for the wire.

    Dates and datetimes become UTC ISO-8601 strings with millisecond
    precision and a ``Z`` suffix (``2024-01-31T10:00:00.000Z``).  Naive
    values are taken to be UTC.  Anything else is returned unchanged.
    """
    if not isinstance(value, date):
        return value
    utc = _as_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
