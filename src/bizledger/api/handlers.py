"""Request handlers.

Each handler takes the caller identity plus the decoded query parameters or
JSON body and returns an ``ApiResponse`` (or a ``FileResponse`` for
downloads). Handlers are framework-neutral so any HTTP server can mount them.
"""

import logging
from datetime import date
from typing import Any, Callable, Mapping, Optional, Union

from bizledger.api import payloads
from bizledger.api.auth import UNAUTHORIZED, Identity, require_identity
from bizledger.api.envelope import ApiResponse, FileResponse, fail, ok
from bizledger.config import BusinessInfo
from bizledger.database.base import SheetStore
from bizledger.domain.analytics import AnalyticsService
from bizledger.domain.client import ClientService
from bizledger.domain.entities import CLIENT_TYPES, TransactionFilter
from bizledger.domain.errors import (
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    client_not_found,
    invoice_not_found,
    transaction_not_found,
)
from bizledger.domain.invoice import InvoiceService
from bizledger.domain.transaction import TransactionService
from bizledger.export.csv_export import invoices_to_csv, transactions_to_csv
from bizledger.export.invoice_pdf import render_invoice_pdf

logger = logging.getLogger(__name__)

Query = Optional[Mapping[str, str]]
Body = Optional[Mapping[str, Any]]
Response = Union[ApiResponse, FileResponse]


def _stats_requested(query: Query) -> bool:
    return bool(query) and query.get("action") == "stats"


class ApiHandlers:
    """Handlers for transactions, clients, invoices, analytics and exports."""

    def __init__(self, store: SheetStore, business: Optional[BusinessInfo] = None):
        """Initialize handlers.

        Args:
            store: Row store instance
            business: Sender details for invoice PDFs
        """
        self.store = store
        self.business = business or BusinessInfo()
        self.transactions = TransactionService(store)
        self.clients = ClientService(store)
        self.invoices = InvoiceService(store)
        self.analytics = AnalyticsService(store)

    def _handle(
        self, route: str, identity: Optional[Identity], action: Callable[[str], Response]
    ) -> Response:
        """Authenticate, run ``action`` with the caller's email and map errors."""
        try:
            actor = require_identity(identity)
            return action(actor)
        except UnauthorizedError:
            return fail(UNAUTHORIZED, 401)
        except NotFoundError as e:
            return fail(str(e), 404)
        except ValidationError as e:
            return fail(str(e), 400)
        except Exception as e:
            logger.exception(f"{route} failed")
            return fail(str(e) or "Internal error", 500)

    # Transactions

    def list_transactions(self, identity: Optional[Identity], query: Query = None) -> Response:
        """GET /transactions. ``action=stats`` returns totals for startDate/endDate."""

        def action(actor: str) -> Response:
            criteria = payloads.transaction_filter(query)
            if _stats_requested(query):
                return ok(self.transactions.get_stats(criteria.start_date, criteria.end_date))
            return ok(self.transactions.filter_transactions(criteria))

        return self._handle("GET /transactions", identity, action)

    def create_transaction(self, identity: Optional[Identity], body: Body) -> Response:
        def action(actor: str) -> Response:
            args = payloads.transaction_create_args(body)
            transaction = self.transactions.create_transaction(actor, **args)
            return ok(transaction, "Transaction created successfully", status=201)

        return self._handle("POST /transactions", identity, action)

    def get_transaction(self, identity: Optional[Identity], transaction_id: str) -> Response:
        def action(actor: str) -> Response:
            transaction = self.transactions.get_transaction(transaction_id)
            if transaction is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            return ok(transaction)

        return self._handle(f"GET /transactions/{transaction_id}", identity, action)

    def update_transaction(
        self, identity: Optional[Identity], transaction_id: str, body: Body
    ) -> Response:
        def action(actor: str) -> Response:
            changes = payloads.transaction_changes(body)
            transaction = self.transactions.update_transaction(transaction_id, **changes)
            return ok(transaction, "Transaction updated successfully")

        return self._handle(f"PUT /transactions/{transaction_id}", identity, action)

    def delete_transaction(self, identity: Optional[Identity], transaction_id: str) -> Response:
        def action(actor: str) -> Response:
            self.transactions.delete_transaction(transaction_id)
            return ok(message="Transaction deleted successfully")

        return self._handle(f"DELETE /transactions/{transaction_id}", identity, action)

    # Clients

    def list_clients(self, identity: Optional[Identity], query: Query = None) -> Response:
        """GET /clients. Supports ``action=stats``, ``query`` search and ``type``."""

        def action(actor: str) -> Response:
            params = query or {}
            if _stats_requested(params):
                return ok(self.clients.get_stats())
            if params.get("query"):
                return ok(self.clients.search_clients(params["query"]))
            if params.get("type") in CLIENT_TYPES:
                return ok(self.clients.list_clients_by_type(params["type"]))
            return ok(self.clients.list_clients())

        return self._handle("GET /clients", identity, action)

    def create_client(self, identity: Optional[Identity], body: Body) -> Response:
        def action(actor: str) -> Response:
            client = self.clients.create_client(actor, **payloads.client_create_args(body))
            return ok(client, "Client created successfully", status=201)

        return self._handle("POST /clients", identity, action)

    def get_client(self, identity: Optional[Identity], client_id: str) -> Response:
        def action(actor: str) -> Response:
            client = self.clients.get_client(client_id)
            if client is None:
                raise NotFoundError(client_not_found(client_id))
            return ok(client)

        return self._handle(f"GET /clients/{client_id}", identity, action)

    def update_client(self, identity: Optional[Identity], client_id: str, body: Body) -> Response:
        def action(actor: str) -> Response:
            client = self.clients.update_client(client_id, **payloads.client_changes(body))
            return ok(client, "Client updated successfully")

        return self._handle(f"PUT /clients/{client_id}", identity, action)

    def delete_client(self, identity: Optional[Identity], client_id: str) -> Response:
        def action(actor: str) -> Response:
            self.clients.delete_client(client_id)
            return ok(message="Client deleted successfully")

        return self._handle(f"DELETE /clients/{client_id}", identity, action)

    # Invoices

    def list_invoices(self, identity: Optional[Identity], query: Query = None) -> Response:
        """GET /invoices. ``action=stats`` returns counts and totals.

        Otherwise ``clientId``, ``status``, ``startDate``/``endDate`` (issue
        date), ``minAmount``/``maxAmount`` and ``searchQuery`` narrow the list.
        """

        def action(actor: str) -> Response:
            if _stats_requested(query):
                return ok(self.invoices.get_stats())
            return ok(self.invoices.filter_invoices(payloads.invoice_filter(query)))

        return self._handle("GET /invoices", identity, action)

    def create_invoice(
        self, identity: Optional[Identity], body: Body, today: Optional[date] = None
    ) -> Response:
        def action(actor: str) -> Response:
            args = payloads.invoice_create_args(body)
            invoice = self.invoices.create_invoice(actor, today=today, **args)
            return ok(invoice, "Invoice created successfully", status=201)

        return self._handle("POST /invoices", identity, action)

    def get_invoice(self, identity: Optional[Identity], invoice_id: str) -> Response:
        def action(actor: str) -> Response:
            invoice = self.invoices.get_invoice(invoice_id)
            if invoice is None:
                raise NotFoundError(invoice_not_found(invoice_id))
            return ok(invoice)

        return self._handle(f"GET /invoices/{invoice_id}", identity, action)

    def update_invoice(
        self,
        identity: Optional[Identity],
        invoice_id: str,
        body: Body,
        today: Optional[date] = None,
    ) -> Response:
        def action(actor: str) -> Response:
            changes = payloads.invoice_changes(body)
            invoice = self.invoices.update_invoice(invoice_id, today=today, **changes)
            return ok(invoice, "Invoice updated successfully")

        return self._handle(f"PUT /invoices/{invoice_id}", identity, action)

    def delete_invoice(self, identity: Optional[Identity], invoice_id: str) -> Response:
        def action(actor: str) -> Response:
            self.invoices.delete_invoice(invoice_id)
            return ok(message="Invoice deleted successfully")

        return self._handle(f"DELETE /invoices/{invoice_id}", identity, action)

    def invoice_pdf(self, identity: Optional[Identity], invoice_id: str) -> Response:
        """GET /invoices/{id}/pdf"""

        def action(actor: str) -> Response:
            invoice = self.invoices.get_invoice(invoice_id)
            if invoice is None:
                raise NotFoundError(invoice_not_found(invoice_id))
            client = self.clients.get_client(invoice.client_id)
            content = render_invoice_pdf(invoice, client, self.business)
            return FileResponse(
                content=content,
                content_type="application/pdf",
                filename=f"invoice_{invoice.invoice_number}.pdf",
            )

        return self._handle(f"GET /invoices/{invoice_id}/pdf", identity, action)

    # Analytics and exports

    def get_analytics(self, identity: Optional[Identity], today: Optional[date] = None) -> Response:
        def action(actor: str) -> Response:
            return ok(self.analytics.get_dashboard(today))

        return self._handle("GET /analytics", identity, action)

    def export_transactions(
        self, identity: Optional[Identity], query: Query = None, today: Optional[date] = None
    ) -> Response:
        """GET /export/transactions, filtered by startDate, endDate and type."""

        def action(actor: str) -> Response:
            criteria = payloads.transaction_filter(query)
            txn_type = criteria.type if criteria.type in ("income", "expense") else None
            transactions = self.transactions.filter_transactions(
                TransactionFilter(
                    start_date=criteria.start_date, end_date=criteria.end_date, type=txn_type
                )
            )
            text = transactions_to_csv(transactions, self.clients.list_clients())
            return FileResponse(
                content=text.encode("utf-8"),
                content_type="text/csv",
                filename=f"transactions_{(today or date.today()).isoformat()}.csv",
            )

        return self._handle("GET /export/transactions", identity, action)

    def export_invoices(
        self, identity: Optional[Identity], query: Query = None, today: Optional[date] = None
    ) -> Response:
        """GET /export/invoices, optionally filtered by status."""

        def action(actor: str) -> Response:
            status = (query or {}).get("status")
            if status:
                invoices = self.invoices.list_by_status(status)
            else:
                invoices = self.invoices.list_invoices()
            text = invoices_to_csv(invoices, self.clients.list_clients())
            return FileResponse(
                content=text.encode("utf-8"),
                content_type="text/csv",
                filename=f"invoices_{(today or date.today()).isoformat()}.csv",
            )

        return self._handle("GET /export/invoices", identity, action)
