"""CSV export of transactions and invoices."""

import csv
import io
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from bizledger.domain.entities import Client, Invoice, Transaction
from bizledger.utils.amount_parser import format_money

TRANSACTION_COLUMNS = [
    "Date",
    "Type",
    "Amount",
    "Category",
    "Description",
    "Payment Method",
    "Client",
    "Tags",
    "Notes",
    "Created By",
    "Created At",
]

INVOICE_COLUMNS = [
    "Invoice Number",
    "Client",
    "Issue Date",
    "Due Date",
    "Status",
    "Subtotal",
    "Tax Rate",
    "Tax",
    "Total",
    "Paid Amount",
    "Balance Due",
    "Line Items",
    "Created By",
    "Created At",
]


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def _timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _percent(rate: Decimal) -> str:
    return f"{rate:.2f}%"


def _write(columns: list[str], records: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=columns,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writeheader()
    writer.writerows(records)
    return buffer.getvalue()


def transactions_to_csv(
    transactions: Sequence[Transaction], clients: Sequence[Client]
) -> str:
    """Render transactions as CSV text.

    Args:
        transactions: Transactions to export, in output order
        clients: Clients used to resolve the Client column

    Returns:
        CSV text with a header row
    """
    names = {client.id: client.name for client in clients}
    records = [
        {
            "Date": _iso(txn.date),
            "Type": txn.type.capitalize(),
            "Amount": format_money(txn.amount),
            "Category": txn.category,
            "Description": txn.description,
            "Payment Method": txn.payment_method,
            "Client": names.get(txn.client_id, "") if txn.client_id else "",
            "Tags": ", ".join(txn.tags),
            "Notes": txn.notes or "",
            "Created By": txn.created_by,
            "Created At": _timestamp(txn.created_at),
        }
        for txn in transactions
    ]
    return _write(TRANSACTION_COLUMNS, records)


def invoices_to_csv(invoices: Sequence[Invoice], clients: Sequence[Client]) -> str:
    """Render invoices as CSV text, one row per invoice."""
    names = {client.id: client.name for client in clients}
    records = [
        {
            "Invoice Number": invoice.invoice_number,
            "Client": names.get(invoice.client_id, ""),
            "Issue Date": _iso(invoice.issue_date),
            "Due Date": _iso(invoice.due_date),
            "Status": invoice.status.capitalize(),
            "Subtotal": format_money(invoice.subtotal),
            "Tax Rate": _percent(invoice.tax_rate),
            "Tax": format_money(invoice.tax),
            "Total": format_money(invoice.total),
            "Paid Amount": format_money(invoice.paid_amount),
            "Balance Due": format_money(invoice.balance_due),
            "Line Items": len(invoice.items),
            "Created By": invoice.created_by,
            "Created At": _timestamp(invoice.created_at),
        }
        for invoice in invoices
    ]
    return _write(INVOICE_COLUMNS, records)
