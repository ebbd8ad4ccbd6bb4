"""Shared pytest fixtures for bizledger tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from bizledger.database.factories import create_sqlite_store
from bizledger.database.workbook_store import WorkbookSheetStore
from bizledger.domain.client import ClientService
from bizledger.domain.invoice import InvoiceService, line_item
from bizledger.domain.transaction import TransactionService

ACTOR = "owner@example.com"


@pytest.fixture
def temp_store():
    """Create a temporary SQLite-backed store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(db_path)
    # Store the path for tests that need it
    store.database_path = db_path

    yield store

    store.close()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def workbook_store(tmp_path):
    """Create a store backed by a temporary .xlsx workbook."""
    store = WorkbookSheetStore(str(tmp_path / "books.xlsx"))
    yield store
    store.close()


@pytest.fixture(params=["sqlite", "workbook"])
def any_store(request, temp_store, workbook_store):
    """Run a test once against each backend."""
    return temp_store if request.param == "sqlite" else workbook_store


@pytest.fixture
def actor():
    return ACTOR


@pytest.fixture
def transaction_service(temp_store):
    """Create a TransactionService with a temporary store."""
    return TransactionService(temp_store)


@pytest.fixture
def client_service(temp_store):
    """Create a ClientService with a temporary store."""
    return ClientService(temp_store)


@pytest.fixture
def invoice_service(temp_store):
    """Create an InvoiceService with a temporary store."""
    return InvoiceService(temp_store)


@pytest.fixture
def sample_client(client_service):
    """Create a sample client for testing."""
    return client_service.create_client(
        ACTOR,
        name="Acme Corp",
        email="billing@acme.test",
        phone="555-0100",
        address="1 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="USA",
        tax_id="TAX-123",
    )


@pytest.fixture
def sample_items():
    """Two line items: 2 x 50 and 1 x 100."""
    return [
        line_item("Design work", Decimal("2"), Decimal("50")),
        line_item("Hosting", Decimal("1"), Decimal("100")),
    ]


@pytest.fixture
def sample_invoice(invoice_service, sample_client, sample_items):
    """Create a sample draft invoice issued 2024-03-01, due 2024-03-31."""
    return invoice_service.create_invoice(
        ACTOR,
        client_id=sample_client.id,
        issue_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        items=sample_items,
        tax_rate=Decimal("10"),
        today=date(2024, 3, 1),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
