"""Invoice domain service.

Invoices and their line items live in two tables. Every write that touches
both runs inside ``store.batch()`` so the backend commits them together.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from bizledger.database.base import SheetStore
from bizledger.database.mappers import (
    INVOICE_HEADERS,
    INVOICE_ITEM_HEADERS,
    INVOICE_ITEMS_TABLE,
    INVOICES_TABLE,
    invoice_item_to_row,
    invoice_to_row,
    row_to_invoice,
    row_to_invoice_item,
)
from bizledger.database.tables import EntityTable
from bizledger.domain.entities import (
    INVOICE_STATUSES,
    ZERO,
    Invoice,
    InvoiceFilter,
    InvoiceItem,
)
from bizledger.domain.errors import NotFoundError, ValidationError, invoice_not_found
from bizledger.domain.invoicing import next_invoice_number, recalculate
from bizledger.domain.validation import check_update_fields, require_choice
from bizledger.utils.ids import generate_id, utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
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


@dataclass(frozen=True)
class InvoiceStats:
    """Invoice counts per status and money totals."""

    total: int
    by_status: dict[str, int] = field(default_factory=dict)
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    outstanding_amount: Decimal = ZERO


def line_item(
    description: str, quantity: Decimal, unit_price: Decimal, item_id: str = ""
) -> InvoiceItem:
    """Build an unsaved line item; ids and amounts are assigned on write."""
    return InvoiceItem(
        id=item_id,
        invoice_id="",
        description=description,
        quantity=quantity,
        unit_price=unit_price,
    )


def matches_filter(invoice: Invoice, criteria: InvoiceFilter) -> bool:
    """Return True if ``invoice`` satisfies every set field of ``criteria``."""
    if criteria.status and invoice.status != criteria.status:
        return False
    if criteria.client_id and invoice.client_id != criteria.client_id:
        return False
    if criteria.start_date is not None and (
        invoice.issue_date is None or invoice.issue_date < criteria.start_date
    ):
        return False
    if criteria.end_date is not None and (
        invoice.issue_date is None or invoice.issue_date > criteria.end_date
    ):
        return False
    if criteria.min_amount is not None and invoice.total < criteria.min_amount:
        return False
    if criteria.max_amount is not None and invoice.total > criteria.max_amount:
        return False
    if criteria.search_query:
        query = criteria.search_query.lower()
        haystacks = (invoice.invoice_number, invoice.notes or "")
        if not any(query in text.lower() for text in haystacks):
            return False
    return True


class InvoiceService:
    """Service for managing invoices and their line items."""

    def __init__(self, store: SheetStore):
        """Initialize invoice service.

        Args:
            store: Row store instance
        """
        self.store = store
        self.invoices = EntityTable(
            store, INVOICES_TABLE, INVOICE_HEADERS, invoice_to_row, row_to_invoice
        )
        self.items = EntityTable(
            store,
            INVOICE_ITEMS_TABLE,
            INVOICE_ITEM_HEADERS,
            invoice_item_to_row,
            row_to_invoice_item,
        )

    def initialize_tables(self) -> None:
        """Create the invoice and line item tables if missing."""
        self.invoices.initialize()
        self.items.initialize()

    def _attach_items(self, invoices: list[Invoice]) -> list[Invoice]:
        grouped: dict[str, list[InvoiceItem]] = defaultdict(list)
        for item in self.items.list_all():
            grouped[item.invoice_id].append(item)
        return [replace(invoice, items=tuple(grouped.get(invoice.id, ()))) for invoice in invoices]

    def list_invoices(self) -> list[Invoice]:
        """List all invoices with their items attached.

        The items table is read once and grouped by invoice id.
        """
        return self._attach_items(self.invoices.list_all())

    def get_invoice_items(self, invoice_id: str) -> list[InvoiceItem]:
        return [item for item in self.items.list_all() if item.invoice_id == invoice_id]

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """Get invoice by ID, with items.

        Returns:
            Invoice entity or None if not found
        """
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            return None
        return replace(invoice, items=tuple(self.get_invoice_items(invoice_id)))

    def list_by_client(self, client_id: str) -> list[Invoice]:
        return self.filter_invoices(InvoiceFilter(client_id=client_id))

    def list_by_status(self, status: str) -> list[Invoice]:
        require_choice("invoice status", status, INVOICE_STATUSES)
        return self.filter_invoices(InvoiceFilter(status=status))

    def filter_invoices(self, criteria: InvoiceFilter) -> list[Invoice]:
        """List invoices matching ``criteria``."""
        return [inv for inv in self.list_invoices() if matches_filter(inv, criteria)]

    def _number_for(self, today: date) -> str:
        numbers = [invoice.invoice_number for invoice in self.invoices.list_all()]
        return next_invoice_number(numbers, today.year)

    @staticmethod
    def _assign_items(invoice_id: str, items: Sequence[InvoiceItem]) -> tuple[InvoiceItem, ...]:
        return tuple(
            replace(item, id=item.id or generate_id("item"), invoice_id=invoice_id)
            for item in items
        )

    def create_invoice(
        self,
        actor: str,
        client_id: str,
        issue_date: date,
        due_date: date,
        items: Sequence[InvoiceItem],
        tax_rate: Decimal = ZERO,
        paid_amount: Decimal = ZERO,
        status: str = "draft",
        notes: Optional[str] = None,
        terms: Optional[str] = None,
        attachments: Sequence[str] = (),
        sent_date: Optional[date] = None,
        paid_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Invoice:
        """Create an invoice with its line items.

        The invoice number is generated for the current year, item amounts and
        invoice totals are computed and the status is derived from payment and
        due-date facts.

        Args:
            actor: Identity of the user creating the invoice
            client_id: Billed client
            issue_date: Issue date
            due_date: Due date
            items: Line items (see ``line_item``)
            tax_rate: Tax rate as a percentage
            paid_amount: Amount already paid
            status: Requested initial status
            notes: Optional notes
            terms: Optional payment terms
            attachments: Attachment references
            sent_date: Optional date the invoice was sent
            paid_date: Optional date the invoice was paid
            today: Evaluation date (defaults to date.today())

        Returns:
            The stored Invoice with items

        Raises:
            ValidationError: If there are no items or the status is unknown
        """
        if not items:
            raise ValidationError("At least one line item is required")
        require_choice("invoice status", status, INVOICE_STATUSES)
        today = today or date.today()

        self.initialize_tables()

        now = utc_now()
        invoice_id = generate_id("inv")
        invoice = recalculate(
            Invoice(
                id=invoice_id,
                invoice_number=self._number_for(today),
                client_id=client_id,
                issue_date=issue_date,
                due_date=due_date,
                status=status,
                tax_rate=tax_rate,
                paid_amount=paid_amount,
                items=self._assign_items(invoice_id, items),
                notes=notes,
                terms=terms,
                attachments=tuple(attachments),
                sent_date=sent_date,
                paid_date=paid_date,
                created_at=now,
                updated_at=now,
                created_by=actor,
            ),
            today=today,
        )

        with self.store.batch():
            self.invoices.append([invoice])
            self.items.append(list(invoice.items))

        logger.info(
            f"Created invoice {invoice.invoice_number} ({invoice.id}) "
            f"with {len(invoice.items)} item(s)"
        )
        return invoice

    def update_invoice(
        self, invoice_id: str, today: Optional[date] = None, **changes: Any
    ) -> Invoice:
        """Update invoice fields and recompute derived fields.

        When ``items`` is supplied the stored item set is replaced: items that
        carry an id keep it, the others get fresh ids.

        Raises:
            NotFoundError: If the invoice doesn't exist
            ValidationError: If a field is unknown or has an invalid value
        """
        check_update_fields("invoice", changes, UPDATABLE_FIELDS)
        requested = changes.get("status")
        require_choice(
            "invoice status", requested, INVOICE_STATUSES, required="status" in changes
        )
        if "items" in changes and not changes["items"]:
            raise ValidationError("At least one line item is required")

        existing = self.get_invoice(invoice_id)
        if existing is None:
            raise NotFoundError(invoice_not_found(invoice_id))

        replace_items = "items" in changes
        if replace_items:
            changes["items"] = self._assign_items(invoice_id, changes["items"])
        if "attachments" in changes:
            changes["attachments"] = tuple(changes["attachments"] or ())

        updated = recalculate(
            replace(existing, **changes, updated_at=utc_now()),
            requested=requested,
            today=today,
        )

        with self.store.batch():
            if replace_items:
                for old in existing.items:
                    self.items.remove(old.id)
                self.items.append(list(updated.items))
            if not self.invoices.replace(invoice_id, updated):
                raise NotFoundError(invoice_not_found(invoice_id))

        logger.info(f"Updated invoice {updated.invoice_number} ({invoice_id})")
        return updated

    def delete_invoice(self, invoice_id: str) -> None:
        """Delete an invoice and its line items.

        Raises:
            NotFoundError: If the invoice doesn't exist
        """
        existing = self.get_invoice(invoice_id)
        if existing is None:
            raise NotFoundError(invoice_not_found(invoice_id))

        with self.store.batch():
            for item in existing.items:
                self.items.remove(item.id)
            self.invoices.remove(invoice_id)
        logger.info(f"Deleted invoice {existing.invoice_number} ({invoice_id})")

    def get_stats(self) -> InvoiceStats:
        """Count invoices per status and sum totals and payments."""
        invoices = self.invoices.list_all()
        by_status = {status: 0 for status in INVOICE_STATUSES}
        for invoice in invoices:
            by_status[invoice.status] = by_status.get(invoice.status, 0) + 1
        total_amount = sum((inv.total for inv in invoices), ZERO)
        paid_amount = sum((inv.paid_amount for inv in invoices), ZERO)
        return InvoiceStats(
            total=len(invoices),
            by_status=by_status,
            total_amount=total_amount,
            paid_amount=paid_amount,
            outstanding_amount=total_amount - paid_amount,
        )
