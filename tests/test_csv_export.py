"""Tests for CSV export."""

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal

from bizledger.domain.entities import Client, Invoice, InvoiceItem, Transaction
from bizledger.export.csv_export import (
    INVOICE_COLUMNS,
    TRANSACTION_COLUMNS,
    invoices_to_csv,
    transactions_to_csv,
)

CREATED = datetime(2024, 3, 1, 9, 30, 15, 250000, tzinfo=timezone.utc)
CLIENTS = [Client(id="c1", name="Acme, Inc.")]


def _rows(text):
    return list(csv.DictReader(io.StringIO(text)))


class TestTransactionsCsv:
    """Tests for transactions_to_csv."""

    def test_header_only_when_empty(self):
        assert transactions_to_csv([], CLIENTS) == ",".join(TRANSACTION_COLUMNS) + "\n"

    def test_row_formatting(self):
        txn = Transaction(
            id="t1",
            type="income",
            amount=Decimal("1200.5"),
            date=date(2024, 3, 2),
            category="Consulting",
            description='Workshop "Intro"',
            payment_method="bank_transfer",
            client_id="c1",
            tags=("a", "b"),
            notes="Line one\nLine two",
            created_at=CREATED,
            created_by="owner@example.com",
        )
        (row,) = _rows(transactions_to_csv([txn], CLIENTS))

        assert row["Date"] == "2024-03-02"
        assert row["Type"] == "Income"
        assert row["Amount"] == "1200.50"
        assert row["Client"] == "Acme, Inc."
        assert row["Tags"] == "a, b"
        assert row["Description"] == 'Workshop "Intro"'
        assert row["Notes"] == "Line one\nLine two"
        assert row["Payment Method"] == "bank_transfer"
        assert row["Created By"] == "owner@example.com"
        assert row["Created At"] == "2024-03-01T09:30:15.250Z"

    def test_quotes_only_when_needed(self):
        txn = Transaction(
            id="t1",
            type="expense",
            amount=Decimal("5"),
            date=date(2024, 3, 2),
            category="Office",
            description="Pens, blue",
        )
        line = transactions_to_csv([txn], []).splitlines()[1]
        assert line.startswith('2024-03-02,Expense,5.00,Office,"Pens, blue",cash,,')

    def test_unknown_client_is_blank(self):
        txn = Transaction(
            id="t1",
            type="expense",
            amount=Decimal("5"),
            date=None,
            category="Office",
            description="Pens",
            client_id="c_deleted",
        )
        (row,) = _rows(transactions_to_csv([txn], CLIENTS))
        assert row["Client"] == ""
        assert row["Date"] == ""


class TestInvoicesCsv:
    """Tests for invoices_to_csv."""

    def test_row_formatting(self):
        items = tuple(
            InvoiceItem(id=f"i{n}", invoice_id="inv1", description="Work",
                        quantity=Decimal("1"), unit_price=Decimal("100"), amount=Decimal("100"))
            for n in range(2)
        )
        invoice = Invoice(
            id="inv1",
            invoice_number="INV-2024-0001",
            client_id="c1",
            issue_date=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
            status="sent",
            subtotal=Decimal("200"),
            tax=Decimal("20"),
            tax_rate=Decimal("10"),
            total=Decimal("220"),
            paid_amount=Decimal("0"),
            balance_due=Decimal("220"),
            items=items,
            created_at=CREATED,
            created_by="owner@example.com",
        )
        text = invoices_to_csv([invoice], CLIENTS)
        assert text.splitlines()[0] == ",".join(INVOICE_COLUMNS)

        (row,) = _rows(text)
        assert row["Invoice Number"] == "INV-2024-0001"
        assert row["Client"] == "Acme, Inc."
        assert row["Status"] == "Sent"
        assert row["Tax Rate"] == "10.00%"
        assert row["Total"] == "220.00"
        assert row["Paid Amount"] == "0.00"
        assert row["Balance Due"] == "220.00"
        assert row["Line Items"] == "2"
