"""Tests for invoice totals, status derivation and numbering."""

from datetime import date
from decimal import Decimal

import pytest

from bizledger.domain.entities import Invoice, InvoiceItem
from bizledger.domain.invoicing import (
    compute_totals,
    derive_status,
    is_overdue,
    next_invoice_number,
    price_item,
    recalculate,
)

TODAY = date(2024, 6, 15)


def _item(quantity: str, unit_price: str, amount: str = "0") -> InvoiceItem:
    return InvoiceItem(
        id="item",
        invoice_id="inv",
        description="Work",
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        amount=Decimal(amount),
    )


def _invoice(**overrides) -> Invoice:
    values = dict(
        id="inv",
        invoice_number="INV-2024-0001",
        client_id="client",
        issue_date=date(2024, 6, 1),
        due_date=date(2024, 7, 1),
        items=(_item("2", "50"), _item("1", "100")),
        tax_rate=Decimal("10"),
    )
    values.update(overrides)
    return Invoice(**values)


class TestComputeTotals:
    """Tests for compute_totals."""

    def test_worked_example(self):
        totals = compute_totals([_item("2", "50"), _item("1", "100")], Decimal("10"))
        assert totals.subtotal == Decimal("200")
        assert totals.tax == Decimal("20")
        assert totals.total == Decimal("220")

    def test_uses_quantity_times_price_not_stored_amount(self):
        totals = compute_totals([_item("3", "10", amount="999")], Decimal("0"))
        assert totals.subtotal == Decimal("30")

    def test_no_items(self):
        totals = compute_totals([], Decimal("10"))
        assert totals.subtotal == Decimal("0")
        assert totals.total == Decimal("0")

    def test_fractional_rate_is_exact(self):
        totals = compute_totals([_item("1", "99.99")], Decimal("8.25"))
        assert totals.tax == Decimal("99.99") * Decimal("8.25") / Decimal("100")
        assert totals.total == totals.subtotal + totals.tax

    def test_price_item(self):
        assert price_item(_item("1.5", "20")).amount == Decimal("30.0")


class TestDeriveStatus:
    """Tests for derive_status."""

    def test_paid_in_full_wins(self):
        invoice = _invoice(total=Decimal("220"), paid_amount=Decimal("220"), status="draft")
        assert derive_status(invoice, requested="sent", today=TODAY) == "paid"

    def test_overpaid_is_paid(self):
        invoice = _invoice(total=Decimal("100"), paid_amount=Decimal("150"))
        assert derive_status(invoice, today=TODAY) == "paid"

    def test_past_due_is_overdue(self):
        invoice = _invoice(total=Decimal("220"), due_date=date(2024, 6, 14), status="sent")
        assert derive_status(invoice, today=TODAY) == "overdue"

    def test_overdue_beats_requested_status(self):
        invoice = _invoice(total=Decimal("220"), due_date=date(2024, 6, 1), status="draft")
        assert derive_status(invoice, requested="sent", today=TODAY) == "overdue"

    def test_due_today_is_not_overdue(self):
        invoice = _invoice(total=Decimal("220"), due_date=TODAY, status="sent")
        assert derive_status(invoice, today=TODAY) == "sent"

    def test_requested_status_used_when_nothing_overrides(self):
        invoice = _invoice(total=Decimal("220"), status="draft")
        assert derive_status(invoice, requested="sent", today=TODAY) == "sent"

    def test_current_status_retained(self):
        invoice = _invoice(total=Decimal("220"), status="sent")
        assert derive_status(invoice, today=TODAY) == "sent"

    def test_cancelled_past_due_becomes_overdue(self):
        invoice = _invoice(total=Decimal("220"), due_date=date(2024, 1, 1), status="cancelled")
        assert derive_status(invoice, today=TODAY) == "overdue"

    def test_zero_total_is_paid(self):
        invoice = _invoice(items=(), total=Decimal("0"), paid_amount=Decimal("0"))
        assert derive_status(invoice, today=TODAY) == "paid"

    def test_is_overdue(self):
        assert is_overdue(date(2024, 6, 14), TODAY)
        assert not is_overdue(TODAY, TODAY)
        assert not is_overdue(None, TODAY)


class TestRecalculate:
    """Tests for recalculate."""

    def test_recomputes_every_derived_field(self):
        invoice = recalculate(_invoice(paid_amount=Decimal("20")), today=TODAY)
        assert [item.amount for item in invoice.items] == [Decimal("100"), Decimal("100")]
        assert invoice.subtotal == Decimal("200")
        assert invoice.tax == Decimal("20")
        assert invoice.total == Decimal("220")
        assert invoice.balance_due == Decimal("200")
        assert invoice.status == "draft"

    def test_full_payment_flips_to_paid(self):
        invoice = recalculate(_invoice(paid_amount=Decimal("220")), today=TODAY)
        assert invoice.status == "paid"
        assert invoice.balance_due == Decimal("0")

    def test_requested_status(self):
        invoice = recalculate(_invoice(), requested="sent", today=TODAY)
        assert invoice.status == "sent"


class TestInvoiceNumbers:
    """Tests for next_invoice_number."""

    def test_first_number_of_year(self):
        assert next_invoice_number([], 2024) == "INV-2024-0001"

    def test_counts_only_current_year(self):
        existing = ["INV-2023-0001", "INV-2023-0002", "INV-2024-0001"]
        assert next_invoice_number(existing, 2024) == "INV-2024-0002"

    def test_skips_numbers_already_taken(self):
        """After a deletion the count points at a number still in use."""
        existing = ["INV-2024-0002", "INV-2024-0003"]
        assert next_invoice_number(existing, 2024) == "INV-2024-0004"

    @pytest.mark.parametrize("count,expected", [(9, "INV-2024-0010"), (9999, "INV-2024-10000")])
    def test_padding(self, count, expected):
        existing = [f"INV-2024-{n:04d}" for n in range(1, count + 1)]
        assert next_invoice_number(existing, 2024) == expected
