"""Scalar cell codec for spreadsheet-style rows.

Rows are flat lists of strings. Composite values (tag and attachment lists)
are stored as embedded JSON text and booleans as the literals "true"/"false".
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from bizledger.domain.entities import ZERO


def format_cell(value: Any) -> str:
    """Render a single field value as a cell string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def encode_row(values: Mapping[str, Any], headers: Sequence[str]) -> list[str]:
    """Produce an ordered row from a field map.

    Fields missing from ``values`` become empty cells.
    """
    return [format_cell(values.get(header)) for header in headers]


def decode_row(row: Sequence[Any], headers: Sequence[str]) -> dict[str, str]:
    """Rebuild a field map from an ordered row.

    Positions past the end of the row become empty strings.
    """
    fields: dict[str, str] = {}
    for index, header in enumerate(headers):
        value = row[index] if index < len(row) else None
        fields[header] = "" if value is None else str(value)
    return fields


def optional_text(value: str) -> Optional[str]:
    """Empty cell means absent."""
    return value if value else None


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_decimal(value: str, default: Decimal = ZERO) -> Decimal:
    """Parse a numeric cell, falling back to ``default`` for blanks or junk."""
    if not value or not value.strip():
        return default
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        return default


def parse_list(value: str) -> tuple[str, ...]:
    """Parse an embedded JSON list cell."""
    if not value:
        return ()
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return ()
    if not isinstance(parsed, list):
        return ()
    return tuple(str(item) for item in parsed)


def parse_date(value: str) -> Optional[date]:
    """Parse an ISO date cell; a full timestamp is truncated to its date."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_datetime(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
