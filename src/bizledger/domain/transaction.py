"""Transaction domain service."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from bizledger.database.base import SheetStore
from bizledger.database.mappers import (
    TRANSACTION_HEADERS,
    TRANSACTIONS_TABLE,
    row_to_transaction,
    transaction_to_row,
)
from bizledger.database.tables import EntityTable
from bizledger.domain.entities import (
    PAYMENT_METHODS,
    RECURRING_FREQUENCIES,
    TRANSACTION_TYPES,
    ZERO,
    Transaction,
    TransactionFilter,
)
from bizledger.domain.errors import NotFoundError, transaction_not_found
from bizledger.domain.validation import check_update_fields, require_choice
from bizledger.utils.ids import generate_id, utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
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


@dataclass(frozen=True)
class CategoryTotal:
    amount: Decimal = ZERO
    count: int = 0


@dataclass(frozen=True)
class TransactionStats:
    """Income/expense totals over a date range."""

    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    transaction_count: int
    category_breakdown: dict[str, CategoryTotal] = field(default_factory=dict)


def matches_filter(txn: Transaction, criteria: TransactionFilter) -> bool:
    """Return True if ``txn`` satisfies every set field of ``criteria``."""
    if criteria.start_date is not None and (txn.date is None or txn.date < criteria.start_date):
        return False
    if criteria.end_date is not None and (txn.date is None or txn.date > criteria.end_date):
        return False
    if criteria.type and txn.type != criteria.type:
        return False
    if criteria.category and txn.category != criteria.category:
        return False
    if criteria.client_id and txn.client_id != criteria.client_id:
        return False
    if criteria.payment_method and txn.payment_method != criteria.payment_method:
        return False
    if criteria.min_amount is not None and txn.amount < criteria.min_amount:
        return False
    if criteria.max_amount is not None and txn.amount > criteria.max_amount:
        return False
    if criteria.search_query:
        query = criteria.search_query.lower()
        haystacks = (txn.description, txn.category, txn.notes or "")
        if not any(query in text.lower() for text in haystacks):
            return False
    if criteria.tags and not set(criteria.tags) & set(txn.tags):
        return False
    return True


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, store: SheetStore):
        """Initialize transaction service.

        Args:
            store: Row store instance
        """
        self.store = store
        self.table = EntityTable(
            store,
            TRANSACTIONS_TABLE,
            TRANSACTION_HEADERS,
            transaction_to_row,
            row_to_transaction,
        )

    def initialize_table(self) -> None:
        """Create the transactions table and header if missing."""
        self.table.initialize()

    def list_transactions(self) -> list[Transaction]:
        """List all transactions in stored order."""
        return self.table.list_all()

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.table.get(transaction_id)

    def filter_transactions(self, criteria: TransactionFilter) -> list[Transaction]:
        """List transactions matching ``criteria`` (full scan)."""
        return [txn for txn in self.list_transactions() if matches_filter(txn, criteria)]

    def create_transaction(
        self,
        actor: str,
        type: str,
        amount: Decimal,
        date: date,
        category: str,
        description: str,
        payment_method: str = "cash",
        client_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        tags: Sequence[str] = (),
        attachments: Sequence[str] = (),
        notes: Optional[str] = None,
        is_recurring: bool = False,
        recurring_frequency: Optional[str] = None,
    ) -> Transaction:
        """Create a transaction.

        Args:
            actor: Identity of the user creating the transaction
            type: "income" or "expense"
            amount: Transaction amount
            date: Transaction date
            category: Category name
            description: Free-text description
            payment_method: One of PAYMENT_METHODS
            client_id: Optional client/vendor reference
            invoice_id: Optional invoice reference
            tags: Tags
            attachments: Attachment references
            notes: Optional notes
            is_recurring: Whether the transaction repeats
            recurring_frequency: Repeat frequency when recurring

        Returns:
            The stored Transaction

        Raises:
            ValidationError: If an enumerated field has an unknown value
        """
        require_choice("transaction type", type, TRANSACTION_TYPES)
        require_choice("payment method", payment_method, PAYMENT_METHODS)
        require_choice("recurring frequency", recurring_frequency, RECURRING_FREQUENCIES)

        self.initialize_table()

        now = utc_now()
        transaction = Transaction(
            id=generate_id("txn"),
            type=type,
            amount=amount,
            date=date,
            category=category,
            description=description,
            payment_method=payment_method,
            client_id=client_id,
            invoice_id=invoice_id,
            tags=tuple(tags),
            attachments=tuple(attachments),
            notes=notes,
            is_recurring=is_recurring,
            recurring_frequency=recurring_frequency,
            created_at=now,
            updated_at=now,
            created_by=actor,
        )
        self.table.append([transaction])
        logger.info(f"Created transaction {transaction.id}")
        return transaction

    def update_transaction(self, transaction_id: str, **changes: Any) -> Transaction:
        """Update transaction fields.

        Only the supplied fields change; ``id`` and ``created_by`` never do.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If a field is unknown or has an invalid value
        """
        check_update_fields("transaction", changes, UPDATABLE_FIELDS)
        require_choice(
            "transaction type", changes.get("type"), TRANSACTION_TYPES, required="type" in changes
        )
        require_choice(
            "payment method",
            changes.get("payment_method"),
            PAYMENT_METHODS,
            required="payment_method" in changes,
        )
        require_choice(
            "recurring frequency", changes.get("recurring_frequency"), RECURRING_FREQUENCIES
        )
        for list_field in ("tags", "attachments"):
            if list_field in changes:
                changes[list_field] = tuple(changes[list_field] or ())

        existing = self.table.get(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        updated = replace(existing, **changes, updated_at=utc_now())
        if not self.table.replace(transaction_id, updated):
            raise NotFoundError(transaction_not_found(transaction_id))
        logger.info(f"Updated transaction {transaction_id}")
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if not self.table.remove(transaction_id):
            raise NotFoundError(transaction_not_found(transaction_id))
        logger.info(f"Deleted transaction {transaction_id}")

    def get_stats(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> TransactionStats:
        """Income, expenses and per-category totals for an optional date range."""
        transactions = self.filter_transactions(
            TransactionFilter(start_date=start_date, end_date=end_date)
        )
        income = sum((t.amount for t in transactions if t.type == "income"), ZERO)
        expenses = sum((t.amount for t in transactions if t.type == "expense"), ZERO)

        breakdown: dict[str, CategoryTotal] = {}
        for txn in transactions:
            current = breakdown.get(txn.category, CategoryTotal())
            breakdown[txn.category] = CategoryTotal(
                amount=current.amount + txn.amount, count=current.count + 1
            )

        return TransactionStats(
            total_income=income,
            total_expenses=expenses,
            net_balance=income - expenses,
            transaction_count=len(transactions),
            category_breakdown=breakdown,
        )
