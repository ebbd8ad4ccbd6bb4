"""Mapper functions to convert between domain entities and table rows.

Each entity has an explicit header tuple. New fields must only ever be
appended to the end of a header tuple: tables written with an older header
are upgraded in place by ``EntityTable.initialize`` and decoded by column
name, so appending a field never misplaces existing data.
"""

from dataclasses import fields
from typing import Any, Sequence

from bizledger.domain import entities as domain
from bizledger.database.codec import (
    decode_row,
    encode_row,
    optional_text,
    parse_bool,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_list,
)

TRANSACTIONS_TABLE = "Transactions"
CLIENTS_TABLE = "Clients"
INVOICES_TABLE = "Invoices"
INVOICE_ITEMS_TABLE = "InvoiceItems"

TRANSACTION_HEADERS = (
    "id",
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
    "created_at",
    "updated_at",
    "created_by",
)

CLIENT_HEADERS = (
    "id",
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
    "created_at",
    "updated_at",
    "created_by",
)

INVOICE_HEADERS = (
    "id",
    "invoice_number",
    "client_id",
    "issue_date",
    "due_date",
    "status",
    "subtotal",
    "tax",
    "tax_rate",
    "total",
    "paid_amount",
    "balance_due",
    "notes",
    "terms",
    "attachments",
    "sent_date",
    "paid_date",
    "created_at",
    "updated_at",
    "created_by",
)

INVOICE_ITEM_HEADERS = (
    "id",
    "invoice_id",
    "description",
    "quantity",
    "unit_price",
    "amount",
)


def _field_map(entity: Any) -> dict[str, Any]:
    return {f.name: getattr(entity, f.name) for f in fields(entity)}


def transaction_to_row(transaction: domain.Transaction) -> list[str]:
    """Convert a Transaction entity to a row."""
    return encode_row(_field_map(transaction), TRANSACTION_HEADERS)


def row_to_transaction(
    row: Sequence[Any], headers: Sequence[str] = TRANSACTION_HEADERS
) -> domain.Transaction:
    """Convert a row to a Transaction entity."""
    obj = decode_row(row, headers)
    return domain.Transaction(
        id=obj.get("id", ""),
        type=obj.get("type") or "expense",
        amount=parse_decimal(obj.get("amount", "")),
        date=parse_date(obj.get("date", "")),
        category=obj.get("category", ""),
        description=obj.get("description", ""),
        payment_method=obj.get("payment_method") or "cash",
        client_id=optional_text(obj.get("client_id", "")),
        invoice_id=optional_text(obj.get("invoice_id", "")),
        tags=parse_list(obj.get("tags", "")),
        attachments=parse_list(obj.get("attachments", "")),
        notes=optional_text(obj.get("notes", "")),
        is_recurring=parse_bool(obj.get("is_recurring", "")),
        recurring_frequency=optional_text(obj.get("recurring_frequency", "")),
        created_at=parse_datetime(obj.get("created_at", "")),
        updated_at=parse_datetime(obj.get("updated_at", "")),
        created_by=obj.get("created_by", ""),
    )


def client_to_row(client: domain.Client) -> list[str]:
    """Convert a Client entity to a row."""
    return encode_row(_field_map(client), CLIENT_HEADERS)


def row_to_client(
    row: Sequence[Any], headers: Sequence[str] = CLIENT_HEADERS
) -> domain.Client:
    """Convert a row to a Client entity."""
    obj = decode_row(row, headers)
    return domain.Client(
        id=obj.get("id", ""),
        name=obj.get("name", ""),
        email=obj.get("email", ""),
        phone=obj.get("phone", ""),
        address=obj.get("address", ""),
        city=obj.get("city", ""),
        state=obj.get("state", ""),
        zip_code=obj.get("zip_code", ""),
        country=obj.get("country", ""),
        tax_id=optional_text(obj.get("tax_id", "")),
        type=obj.get("type") or "client",
        notes=optional_text(obj.get("notes", "")),
        created_at=parse_datetime(obj.get("created_at", "")),
        updated_at=parse_datetime(obj.get("updated_at", "")),
        created_by=obj.get("created_by", ""),
    )


def invoice_to_row(invoice: domain.Invoice) -> list[str]:
    """Convert an Invoice entity to a row. Items are stored in their own table."""
    return encode_row(_field_map(invoice), INVOICE_HEADERS)


def row_to_invoice(
    row: Sequence[Any], headers: Sequence[str] = INVOICE_HEADERS
) -> domain.Invoice:
    """Convert a row to an Invoice entity without items."""
    obj = decode_row(row, headers)
    return domain.Invoice(
        id=obj.get("id", ""),
        invoice_number=obj.get("invoice_number", ""),
        client_id=obj.get("client_id", ""),
        issue_date=parse_date(obj.get("issue_date", "")),
        due_date=parse_date(obj.get("due_date", "")),
        status=obj.get("status") or "draft",
        subtotal=parse_decimal(obj.get("subtotal", "")),
        tax=parse_decimal(obj.get("tax", "")),
        tax_rate=parse_decimal(obj.get("tax_rate", "")),
        total=parse_decimal(obj.get("total", "")),
        paid_amount=parse_decimal(obj.get("paid_amount", "")),
        balance_due=parse_decimal(obj.get("balance_due", "")),
        notes=optional_text(obj.get("notes", "")),
        terms=optional_text(obj.get("terms", "")),
        attachments=parse_list(obj.get("attachments", "")),
        sent_date=parse_date(obj.get("sent_date", "")),
        paid_date=parse_date(obj.get("paid_date", "")),
        created_at=parse_datetime(obj.get("created_at", "")),
        updated_at=parse_datetime(obj.get("updated_at", "")),
        created_by=obj.get("created_by", ""),
    )


def invoice_item_to_row(item: domain.InvoiceItem) -> list[str]:
    """Convert an InvoiceItem entity to a row."""
    return encode_row(_field_map(item), INVOICE_ITEM_HEADERS)


def row_to_invoice_item(
    row: Sequence[Any], headers: Sequence[str] = INVOICE_ITEM_HEADERS
) -> domain.InvoiceItem:
    """Convert a row to an InvoiceItem entity."""
    obj = decode_row(row, headers)
    return domain.InvoiceItem(
        id=obj.get("id", ""),
        invoice_id=obj.get("invoice_id", ""),
        description=obj.get("description", ""),
        quantity=parse_decimal(obj.get("quantity", "")),
        unit_price=parse_decimal(obj.get("unit_price", "")),
        amount=parse_decimal(obj.get("amount", "")),
    )
