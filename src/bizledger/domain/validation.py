"""Validation helpers shared by the domain services."""

from typing import Any, Iterable, Mapping, Optional

from bizledger.domain.errors import ValidationError, invalid_choice


def require_choice(
    field: str, value: Optional[str], choices: tuple[str, ...], required: bool = False
) -> None:
    """Raise ValidationError unless ``value`` is one of ``choices``.

    None is accepted only when ``required`` is false.
    """
    if value is None and not required:
        return
    if value not in choices:
        raise ValidationError(invalid_choice(field, value, choices))


def check_update_fields(
    entity_name: str, changes: Mapping[str, Any], allowed: Iterable[str]
) -> None:
    """Reject update payloads that touch unknown or immutable fields."""
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ValidationError(
            f"Cannot update {entity_name} field(s): {', '.join(unknown)}"
        )
