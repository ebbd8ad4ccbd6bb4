"""Request body and query parsing.

Bodies and query parameters use camelCase keys. Parsers turn them into the
keyword arguments the domain services take and raise ValidationError with
a client-facing message on bad input.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from bizledger.domain.entities import ZERO, InvoiceFilter, InvoiceItem, TransactionFilter
from bizledger.domain.errors import ValidationError
from bizledger.domain.invoice import line_item
from bizledger.api.envelope import to_snake
from bizledger.utils.amount_parser import parse_amount
from bizledger.utils.date_parser import parse_date

MISSING_FIELDS = "Missing required fields"
NAME_AND_EMAIL_REQUIRED = "Name and email are required"
CLIENT_REQUIRED = "Client is required"
ISSUE_DATE_REQUIRED = "Issue date is required"
DUE_DATE_REQUIRED = "Due date is required"
ITEMS_REQUIRED = "At least one line item is required"
INVALID_ITEM = "Invalid line item data"

TRANSACTION_FIELDS = (
    "type",
    "amount",
    "date",
    "category",
    "description",
    "payment_method",
    "client_id",
    "invoice_id",
    "tags",
    "attachments",
    "notes",
    "is_recurring",
    "recurring_frequency",
)

CLIENT_FIELDS = (
    "name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
    "country",
    "tax_id",
    "type",
    "notes",
)

INVOICE_FIELDS = (
    "client_id",
    "issue_date",
    "due_date",
    "status",
    "tax_rate",
    "paid_amount",
    "items",
    "notes",
    "terms",
    "attachments",
    "sent_date",
    "paid_date",
)


def normalize_keys(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Map camelCase keys to snake_case."""
    return {to_snake(key): value for key, value in (body or {}).items()}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _amount(value: Any, field: str) -> Decimal:
    try:
        return parse_amount(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}")


def _positive_amount(value: Any, field: str) -> Decimal:
    amount = _amount(value, field)
    if amount <= 0:
        raise ValidationError(f"{field.capitalize()} must be greater than zero")
    return amount


def _optional_amount(value: Any, field: str) -> Decimal:
    if value is None or value == "":
        return ZERO
    return _amount(value, field)


def _date(value: Any, field: str) -> date:
    try:
        return parse_date(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}")


def _optional_date(value: Any, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return _date(value, field)


def _string_list(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(part) for part in value)


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _convert_transaction_field(key: str, value: Any) -> Any:
    if key == "amount":
        return _positive_amount(value, "amount")
    if key == "date":
        return _date(value, "date")
    if key in ("tags", "attachments"):
        return _string_list(value)
    if key == "is_recurring":
        return _bool(value)
    if key in ("client_id", "invoice_id", "notes", "recurring_frequency"):
        return _text(value)
    return value


def transaction_create_args(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Keyword arguments for TransactionService.create_transaction."""
    data = normalize_keys(body)
    required = ("type", "amount", "date", "category", "description")
    if any(not data.get(key) for key in required):
        raise ValidationError(MISSING_FIELDS)

    args = {
        key: _convert_transaction_field(key, data[key])
        for key in TRANSACTION_FIELDS
        if data.get(key) is not None
    }
    args["payment_method"] = args.get("payment_method") or "cash"
    return args


def transaction_changes(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Changes for TransactionService.update_transaction; absent keys are left alone."""
    data = normalize_keys(body)
    return {
        key: _convert_transaction_field(key, data[key])
        for key in TRANSACTION_FIELDS
        if key in data
    }


def client_create_args(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Keyword arguments for ClientService.create_client."""
    data = normalize_keys(body)
    name = _text(data.get("name"))
    email = _text(data.get("email"))
    if not name or not email:
        raise ValidationError(NAME_AND_EMAIL_REQUIRED)

    args: dict[str, Any] = {"name": name, "email": email}
    for key in ("phone", "address", "city", "state", "zip_code", "country"):
        args[key] = str(data.get(key) or "")
    args["tax_id"] = _text(data.get("tax_id"))
    args["notes"] = _text(data.get("notes"))
    args["type"] = data.get("type") or "client"
    return args


def client_changes(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    data = normalize_keys(body)
    changes: dict[str, Any] = {}
    for key in CLIENT_FIELDS:
        if key not in data:
            continue
        if key in ("tax_id", "notes"):
            changes[key] = _text(data[key])
        elif key in ("name", "email"):
            changes[key] = str(data[key] or "").strip()
        else:
            changes[key] = data[key] if key == "type" else str(data[key] or "")
    return changes


def _items(raw_items: Any, keep_ids: bool) -> list[InvoiceItem]:
    if not raw_items or not isinstance(raw_items, (list, tuple)):
        raise ValidationError(ITEMS_REQUIRED)

    items = []
    for raw in raw_items:
        item = normalize_keys(raw) if isinstance(raw, Mapping) else {}
        if not item.get("description") or not item.get("quantity") or not item.get("unit_price"):
            raise ValidationError(INVALID_ITEM)
        try:
            quantity = parse_amount(str(item["quantity"]))
            unit_price = parse_amount(str(item["unit_price"]))
        except ValueError:
            raise ValidationError(INVALID_ITEM)
        if quantity < 0 or unit_price < 0:
            raise ValidationError(INVALID_ITEM)
        items.append(
            line_item(
                str(item["description"]),
                quantity,
                unit_price,
                item_id=str(item.get("id") or "") if keep_ids else "",
            )
        )
    return items


def _convert_invoice_field(key: str, value: Any) -> Any:
    if key in ("issue_date", "due_date"):
        return _date(value, key.replace("_", " "))
    if key in ("sent_date", "paid_date"):
        return _optional_date(value, key.replace("_", " "))
    if key in ("tax_rate", "paid_amount"):
        return _optional_amount(value, key.replace("_", " "))
    if key == "items":
        return _items(value, keep_ids=True)
    if key == "attachments":
        return _string_list(value)
    if key in ("notes", "terms"):
        return _text(value)
    return value


def invoice_create_args(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Keyword arguments for InvoiceService.create_invoice."""
    data = normalize_keys(body)
    if not data.get("client_id"):
        raise ValidationError(CLIENT_REQUIRED)
    if not data.get("issue_date"):
        raise ValidationError(ISSUE_DATE_REQUIRED)
    if not data.get("due_date"):
        raise ValidationError(DUE_DATE_REQUIRED)

    args = {
        key: _convert_invoice_field(key, data[key])
        for key in INVOICE_FIELDS
        if key != "items" and data.get(key) is not None
    }
    args["items"] = _items(data.get("items"), keep_ids=False)
    args["status"] = data.get("status") or "draft"
    return args


def invoice_changes(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    data = normalize_keys(body)
    return {
        key: _convert_invoice_field(key, data[key])
        for key in INVOICE_FIELDS
        if key in data
    }


def transaction_filter(query: Optional[Mapping[str, str]]) -> TransactionFilter:
    """Build a TransactionFilter from query parameters; empty values are ignored."""
    params = {key: value for key, value in normalize_keys(query).items() if value}
    return TransactionFilter(
        start_date=_optional_date(params.get("start_date"), "start date"),
        end_date=_optional_date(params.get("end_date"), "end date"),
        type=params.get("type"),
        category=params.get("category"),
        client_id=params.get("client_id"),
        payment_method=params.get("payment_method"),
        min_amount=_amount(params["min_amount"], "min amount") if "min_amount" in params else None,
        max_amount=_amount(params["max_amount"], "max amount") if "max_amount" in params else None,
        search_query=params.get("search_query"),
        tags=_string_list(params.get("tags")),
    )


def invoice_filter(query: Optional[Mapping[str, str]]) -> InvoiceFilter:
    params = {key: value for key, value in normalize_keys(query).items() if value}
    return InvoiceFilter(
        status=params.get("status"),
        client_id=params.get("client_id"),
        start_date=_optional_date(params.get("start_date"), "start date"),
        end_date=_optional_date(params.get("end_date"), "end date"),
        min_amount=_amount(params["min_amount"], "min amount") if "min_amount" in params else None,
        max_amount=_amount(params["max_amount"], "max amount") if "max_amount" in params else None,
        search_query=params.get("search_query"),
    )
