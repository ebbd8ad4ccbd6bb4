"""Invoice totals, status derivation and numbering.

Everything here is a pure function. ``recalculate`` is the one place derived
invoice fields are computed; services call it on every invoice they write.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from bizledger.domain.entities import ZERO, Invoice, InvoiceItem

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived money fields of an invoice."""

    subtotal: Decimal
    tax: Decimal
    total: Decimal


def price_item(item: InvoiceItem) -> InvoiceItem:
    """Return the item with ``amount`` recomputed from quantity and unit price."""
    return replace(item, amount=item.quantity * item.unit_price)


def compute_totals(items: Iterable[InvoiceItem], tax_rate: Decimal) -> InvoiceTotals:
    """Compute subtotal, tax and total for a set of line items.

    Args:
        items: Line items; each contributes quantity * unit_price
        tax_rate: Tax rate as a percentage (10 means 10%)

    Returns:
        InvoiceTotals with total == subtotal + tax
    """
    subtotal = sum((item.quantity * item.unit_price for item in items), ZERO)
    tax = subtotal * tax_rate / HUNDRED
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def is_overdue(due_date: Optional[date], today: date) -> bool:
    """A due date is overdue only once it is strictly in the past."""
    return due_date is not None and due_date < today


def derive_status(
    invoice: Invoice, requested: Optional[str] = None, today: Optional[date] = None
) -> str:
    """Work out an invoice's status from its payment and due-date facts.

    Paid in full always wins, then overdue, then the requested status, then
    the current one. Cancelled invoices get no special treatment: paying
    them in full or passing their due date changes their status too.

    Args:
        invoice: Invoice with up-to-date total and paid_amount
        requested: Status explicitly asked for by the caller, if any
        today: Evaluation date (defaults to date.today())

    Returns:
        Status string
    """
    today = today or date.today()
    if invoice.paid_amount >= invoice.total:
        return "paid"
    if is_overdue(invoice.due_date, today) and invoice.status != "paid":
        return "overdue"
    if requested:
        return requested
    return invoice.status


def recalculate(
    invoice: Invoice, requested: Optional[str] = None, today: Optional[date] = None
) -> Invoice:
    """Reprice items and recompute every derived invoice field."""
    items = tuple(price_item(item) for item in invoice.items)
    totals = compute_totals(items, invoice.tax_rate)
    updated = replace(
        invoice,
        items=items,
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        balance_due=totals.total - invoice.paid_amount,
    )
    return replace(updated, status=derive_status(updated, requested, today))


def invoice_number_prefix(year: int) -> str:
    return f"INV-{year}"


def next_invoice_number(existing_numbers: Sequence[str], year: int) -> str:
    """Return the next invoice number for ``year``.

    The sequence is the count of numbers already issued with the year's
    prefix, plus one. If that number is taken (an earlier invoice of the year
    was deleted), the sequence keeps counting up until it finds a free one.
    """
    prefix = invoice_number_prefix(year)
    year_numbers = [number for number in existing_numbers if number.startswith(prefix)]
    taken = set(year_numbers)
    sequence = len(year_numbers) + 1
    while f"{prefix}-{sequence:04d}" in taken:
        sequence += 1
    return f"{prefix}-{sequence:04d}"
