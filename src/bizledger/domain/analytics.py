"""Dashboard analytics over transactions, clients and invoices.

``build_dashboard`` is a pure function of three snapshots and a date, so the
same inputs always give the same dashboard.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from dateutil.relativedelta import relativedelta

from bizledger.database.base import SheetStore
from bizledger.domain.client import ClientService
from bizledger.domain.entities import ZERO, Client, Invoice, Transaction
from bizledger.domain.invoice import InvoiceService
from bizledger.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

MONTHS_SHOWN = 6
TOP_CLIENTS = 5
RECENT_TRANSACTIONS = 10
UPCOMING_INVOICES = 5
UPCOMING_WINDOW = timedelta(days=30)
UNKNOWN_CLIENT = "Unknown"


@dataclass(frozen=True)
class DashboardSummary:
    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    transaction_count: int
    client_count: int
    invoice_count: int
    overdue_invoices: int


@dataclass(frozen=True)
class MonthlyPoint:
    """Income and expenses of one calendar month."""

    month_key: str
    label: str
    income: Decimal
    expenses: Decimal
    net: Decimal


@dataclass(frozen=True)
class CategorySlice:
    """One category's share of total income or total expenses."""

    category: str
    amount: Decimal
    count: int
    type: str
    percentage: Decimal


@dataclass(frozen=True)
class TopClient:
    client_id: str
    client_name: str
    total_revenue: Decimal
    transaction_count: int


@dataclass(frozen=True)
class RecentTransaction:
    transaction: Transaction
    client_name: Optional[str]


@dataclass(frozen=True)
class UpcomingInvoice:
    invoice: Invoice
    client_name: str


@dataclass(frozen=True)
class Dashboard:
    summary: DashboardSummary
    monthly: tuple[MonthlyPoint, ...]
    categories: tuple[CategorySlice, ...]
    top_clients: tuple[TopClient, ...]
    recent_transactions: tuple[RecentTransaction, ...]
    upcoming_invoices: tuple[UpcomingInvoice, ...]


def _sum(transactions: Sequence[Transaction], txn_type: str) -> Decimal:
    return sum((t.amount for t in transactions if t.type == txn_type), ZERO)


def monthly_series(transactions: Sequence[Transaction], today: date) -> list[MonthlyPoint]:
    """Trailing months ending with the month of ``today``, oldest first."""
    current = today.replace(day=1)
    points = []
    for offset in range(MONTHS_SHOWN - 1, -1, -1):
        month_start = current - relativedelta(months=offset)
        in_month = [
            t
            for t in transactions
            if t.date is not None
            and (t.date.year, t.date.month) == (month_start.year, month_start.month)
        ]
        income = _sum(in_month, "income")
        expenses = _sum(in_month, "expense")
        points.append(
            MonthlyPoint(
                month_key=month_start.strftime("%Y-%m"),
                label=month_start.strftime("%b %Y"),
                income=income,
                expenses=expenses,
                net=income - expenses,
            )
        )
    return points


def category_breakdown(
    transactions: Sequence[Transaction], total_income: Decimal, total_expenses: Decimal
) -> list[CategorySlice]:
    """Group by category.

    A category takes the type of the first transaction seen in it, and its
    percentage is computed against the total of that type.
    """
    groups: dict[str, dict] = {}
    for txn in transactions:
        group = groups.setdefault(txn.category, {"amount": ZERO, "count": 0, "type": txn.type})
        group["amount"] += txn.amount
        group["count"] += 1

    slices = []
    for category, group in groups.items():
        if group["type"] == "expense" and total_expenses > 0:
            percentage = group["amount"] / total_expenses * 100
        elif group["type"] == "income" and total_income > 0:
            percentage = group["amount"] / total_income * 100
        else:
            percentage = ZERO
        slices.append(
            CategorySlice(
                category=category,
                amount=group["amount"],
                count=group["count"],
                type=group["type"],
                percentage=percentage,
            )
        )
    slices.sort(key=lambda s: abs(s.amount), reverse=True)
    return slices


def top_clients(
    transactions: Sequence[Transaction], names: dict[str, str]
) -> list[TopClient]:
    """Rank clients by income revenue."""
    revenue: dict[str, list] = {}
    for txn in transactions:
        if txn.type != "income" or not txn.client_id:
            continue
        entry = revenue.setdefault(txn.client_id, [ZERO, 0])
        entry[0] += txn.amount
        entry[1] += 1

    ranked = [
        TopClient(
            client_id=client_id,
            client_name=names.get(client_id) or UNKNOWN_CLIENT,
            total_revenue=total,
            transaction_count=count,
        )
        for client_id, (total, count) in revenue.items()
    ]
    ranked.sort(key=lambda c: c.total_revenue, reverse=True)
    return ranked[:TOP_CLIENTS]


def recent_transactions(
    transactions: Sequence[Transaction], names: dict[str, str]
) -> list[RecentTransaction]:
    """Most recent transactions by date; undated ones sort last."""
    ordered = sorted(
        transactions,
        key=lambda t: t.date.toordinal() if t.date else 0,
        reverse=True,
    )
    return [
        RecentTransaction(
            transaction=txn,
            client_name=names.get(txn.client_id) if txn.client_id else None,
        )
        for txn in ordered[:RECENT_TRANSACTIONS]
    ]


def upcoming_invoices(
    invoices: Sequence[Invoice], names: dict[str, str], today: date
) -> list[UpcomingInvoice]:
    """Unpaid invoices due within the next 30 days, soonest first."""
    horizon = today + UPCOMING_WINDOW
    due = [
        invoice
        for invoice in invoices
        if invoice.due_date is not None
        and today <= invoice.due_date <= horizon
        and invoice.status != "paid"
    ]
    due.sort(key=lambda invoice: invoice.due_date)
    return [
        UpcomingInvoice(
            invoice=invoice,
            client_name=names.get(invoice.client_id) or UNKNOWN_CLIENT,
        )
        for invoice in due[:UPCOMING_INVOICES]
    ]


def build_dashboard(
    transactions: Sequence[Transaction],
    clients: Sequence[Client],
    invoices: Sequence[Invoice],
    today: date,
) -> Dashboard:
    """Aggregate the dashboard from full snapshots of the three collections.

    Args:
        transactions: All transactions
        clients: All clients, used to resolve names
        invoices: All invoices
        today: Reference date for the monthly window and due-date checks

    Returns:
        Dashboard
    """
    names = {client.id: client.name for client in clients}
    total_income = _sum(transactions, "income")
    total_expenses = _sum(transactions, "expense")

    summary = DashboardSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
        transaction_count=len(transactions),
        client_count=len(clients),
        invoice_count=len(invoices),
        overdue_invoices=sum(1 for invoice in invoices if invoice.status == "overdue"),
    )

    return Dashboard(
        summary=summary,
        monthly=tuple(monthly_series(transactions, today)),
        categories=tuple(category_breakdown(transactions, total_income, total_expenses)),
        top_clients=tuple(top_clients(transactions, names)),
        recent_transactions=tuple(recent_transactions(transactions, names)),
        upcoming_invoices=tuple(upcoming_invoices(invoices, names, today)),
    )


class AnalyticsService:
    """Service that loads the collections and builds the dashboard."""

    def __init__(self, store: SheetStore):
        """Initialize analytics service.

        Args:
            store: Row store instance
        """
        self.transactions = TransactionService(store)
        self.clients = ClientService(store)
        self.invoices = InvoiceService(store)

    def get_dashboard(self, today: Optional[date] = None) -> Dashboard:
        """Build the dashboard for ``today`` (defaults to date.today())."""
        today = today or date.today()
        transactions = self.transactions.list_transactions()
        clients = self.clients.list_clients()
        invoices = self.invoices.list_invoices()
        logger.debug(
            f"Building dashboard from {len(transactions)} transactions, "
            f"{len(clients)} clients and {len(invoices)} invoices"
        )
        return build_dashboard(transactions, clients, invoices, today)
