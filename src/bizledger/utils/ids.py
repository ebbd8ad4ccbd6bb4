"""Identifier and timestamp helpers."""

import secrets
import string
import time
from datetime import datetime, UTC

_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    """Render a non-negative integer in base 36."""
    if number < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_id(prefix: str | None = None) -> str:
    """Generate an opaque id from the current time and a random suffix.

    Collisions are not checked; the random part makes them negligible.
    """
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(7))
    return f"{prefix}_{timestamp}{suffix}" if prefix else f"{timestamp}{suffix}"


def utc_now() -> datetime:
    """Current instant, timezone-aware, truncated to milliseconds."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)
