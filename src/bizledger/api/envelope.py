"""Response envelope and JSON-safe serialization for the request layer."""

import re
from dataclasses import dataclass, fields, is_dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional


def to_camel(name: str) -> str:
    """zip_code -> zipCode"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_snake(name: str) -> str:
    """zipCode -> zip_code"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def serialize(value: Any) -> Any:
    """Convert entities and result objects to JSON-compatible values.

    Dataclass field names become camelCase keys; plain dict keys are kept.
    Money is emitted as float, dates as ISO strings, UTC timestamps with a
    trailing "Z".
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {to_camel(f.name): serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(key): serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        if value.utcoffset() == timedelta(0):
            return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass
class ApiResponse:
    """JSON envelope returned by every handler."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    status: int = 200

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            body["data"] = serialize(self.data)
        if self.error is not None:
            body["error"] = self.error
        if self.message is not None:
            body["message"] = self.message
        return body


@dataclass
class FileResponse:
    """Binary or text download (CSV export, invoice PDF)."""

    content: bytes
    content_type: str
    filename: str
    status: int = 200

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Disposition": f'attachment; filename="{self.filename}"',
        }


def ok(data: Any = None, message: Optional[str] = None, status: int = 200) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message, status=status)


def fail(error: str, status: int) -> ApiResponse:
    return ApiResponse(success=False, error=error, status=status)
