"""Domain model entities for bizledger.

These are pure data classes representing business concepts, independent of
how rows are laid out in the backing store. Entities are immutable; updates
build a new instance with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")

TRANSACTION_TYPES = ("income", "expense")
PAYMENT_METHODS = (
    "cash",
    "bank_transfer",
    "credit_card",
    "debit_card",
    "paypal",
    "check",
    "other",
)
RECURRING_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")
CLIENT_TYPES = ("client", "vendor", "both")
INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")


@dataclass(frozen=True)
class Transaction:
    """Income or expense record."""

    id: str
    type: str
    amount: Decimal
    date: Optional[date]
    category: str
    description: str
    payment_method: str = "cash"
    client_id: Optional[str] = None
    invoice_id: Optional[str] = None
    tags: tuple[str, ...] = ()
    attachments: tuple[str, ...] = ()
    notes: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: str = ""


@dataclass(frozen=True)
class Client:
    """Client or vendor domain entity."""

    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    tax_id: Optional[str] = None
    type: str = "client"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: str = ""


@dataclass(frozen=True)
class InvoiceItem:
    """Invoice line item, stored separately from its invoice."""

    id: str
    invoice_id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal = ZERO


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity.

    ``subtotal``, ``tax``, ``total`` and ``balance_due`` are derived from the
    items, ``tax_rate`` and ``paid_amount``; they are only recomputed when the
    invoice is written (see ``bizledger.domain.invoicing.recalculate``).
    """

    id: str
    invoice_number: str
    client_id: str
    issue_date: Optional[date]
    due_date: Optional[date]
    status: str = "draft"
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    tax_rate: Decimal = ZERO
    total: Decimal = ZERO
    paid_amount: Decimal = ZERO
    balance_due: Decimal = ZERO
    items: tuple[InvoiceItem, ...] = ()
    notes: Optional[str] = None
    terms: Optional[str] = None
    attachments: tuple[str, ...] = ()
    sent_date: Optional[date] = None
    paid_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: str = ""


@dataclass(frozen=True)
class TransactionFilter:
    """Transaction query; unset fields do not filter."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[str] = None
    category: Optional[str] = None
    client_id: Optional[str] = None
    payment_method: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search_query: Optional[str] = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class InvoiceFilter:
    """Invoice query; dates apply to the issue date, amounts to the total."""

    status: Optional[str] = None
    client_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search_query: Optional[str] = None
