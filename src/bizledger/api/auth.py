"""Caller identity for the request layer."""

from dataclasses import dataclass
from typing import Optional

from bizledger.domain.errors import UnauthorizedError

UNAUTHORIZED = "Unauthorized"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller; ``email`` is recorded as ``created_by``."""

    email: str


def require_identity(identity: Optional[Identity]) -> str:
    """Return the caller's email or raise UnauthorizedError."""
    if identity is None or not identity.email:
        raise UnauthorizedError(UNAUTHORIZED)
    return identity.email
