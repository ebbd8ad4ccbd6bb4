"""Tests for invoice commands."""

import re
from decimal import Decimal

import pytest

from bizledger.cli.commands.invoice import parse_item_spec
from bizledger.cli.main import cli

ACTOR = "owner@example.com"


def run(cli_runner, store_path, *args, **kwargs):
    return cli_runner.invoke(cli, ["--store", store_path, "--user", ACTOR, *args], **kwargs)


def create(cli_runner, store_path, client_id, *extra):
    result = run(
        cli_runner,
        store_path,
        "invoice",
        "create",
        "--client",
        client_id,
        "--item",
        "Design work:2:50",
        "--item",
        "Hosting:1:100",
        "--tax-rate",
        "10",
        *extra,
    )
    assert result.exit_code == 0, result.output
    return re.search(r"\((inv_\S+)\)", result.output).group(1)


class TestParseItemSpec:
    """Tests for DESCRIPTION:QUANTITY:UNIT_PRICE parsing."""

    def test_parse(self):
        item = parse_item_spec("Design work:2:150")
        assert item.description == "Design work"
        assert item.quantity == Decimal("2")
        assert item.unit_price == Decimal("150")

    def test_description_may_contain_colons(self):
        item = parse_item_spec("Phase 2: build:1:$1,000")
        assert item.description == "Phase 2: build"
        assert item.unit_price == Decimal("1000")

    @pytest.mark.parametrize("spec", ["Design", "Design:2", ":2:50", "Design:x:50", "Design:-1:50"])
    def test_invalid(self, spec):
        with pytest.raises(ValueError):
            parse_item_spec(spec)


def test_create_invoice(cli_runner, temp_store, sample_client):
    result = run(
        cli_runner,
        temp_store.database_path,
        "invoice",
        "create",
        "--client",
        sample_client.id,
        "--issue-date",
        "2024-03-01",
        "--due-date",
        "2099-03-31",
        "--item",
        "Design work:2:50",
        "--item",
        "Hosting:1:100",
        "--tax-rate",
        "10",
    )
    assert result.exit_code == 0, result.output
    assert "total $220.00, status draft" in result.output
    assert "Warning" not in result.output


def test_create_warns_about_unknown_client(cli_runner, temp_store):
    result = run(
        cli_runner,
        temp_store.database_path,
        "invoice",
        "create",
        "--client",
        "client_missing",
        "--item",
        "Work:1:10",
    )
    assert result.exit_code == 0
    assert "Warning: client client_missing does not exist" in result.output


def test_create_rejects_bad_item(cli_runner, temp_store):
    result = run(
        cli_runner,
        temp_store.database_path,
        "invoice",
        "create",
        "--client",
        "client_x",
        "--item",
        "Work:one:10",
    )
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_list_and_show(cli_runner, temp_store, sample_client):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)

    result = run(cli_runner, temp_store.database_path, "invoice", "list")
    assert "Acme Corp" in result.output
    assert "$220.00" in result.output

    result = run(cli_runner, temp_store.database_path, "invoice", "show", invoice_id)
    assert result.exit_code == 0
    assert "Client: Acme Corp" in result.output
    assert "Design work" in result.output
    assert "Balance due: $220.00" in result.output


def test_list_by_status(cli_runner, temp_store, sample_client):
    create(cli_runner, temp_store.database_path, sample_client.id)
    result = run(cli_runner, temp_store.database_path, "invoice", "list", "--status", "paid")
    assert "No invoices found." in result.output


def test_record_full_payment(cli_runner, temp_store, sample_client):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)
    result = run(
        cli_runner, temp_store.database_path, "invoice", "update", invoice_id, "--paid", "220"
    )
    assert result.exit_code == 0, result.output
    assert "status paid, balance due $0.00" in result.output


def test_replace_items(cli_runner, temp_store, sample_client):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)
    result = run(
        cli_runner,
        temp_store.database_path,
        "invoice",
        "update",
        invoice_id,
        "--item",
        "Retainer:1:500",
        "--tax-rate",
        "0",
    )
    assert "balance due $500.00" in result.output

    result = run(cli_runner, temp_store.database_path, "invoice", "show", invoice_id)
    assert "Retainer" in result.output
    assert "Design work" not in result.output


def test_update_missing_invoice(cli_runner, temp_store):
    result = run(
        cli_runner, temp_store.database_path, "invoice", "update", "inv_missing", "--paid", "5"
    )
    assert result.exit_code == 1
    assert "Error: Invoice inv_missing not found" in result.output


def test_delete_invoice(cli_runner, temp_store, sample_client):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)
    result = run(cli_runner, temp_store.database_path, "invoice", "delete", invoice_id, "--yes")
    assert result.exit_code == 0
    assert "No invoices found." in run(cli_runner, temp_store.database_path, "invoice", "list").output


def test_pdf(cli_runner, temp_store, sample_client, tmp_path):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)
    output = tmp_path / "out.pdf"
    result = run(
        cli_runner, temp_store.database_path, "invoice", "pdf", invoice_id, "-o", str(output)
    )
    assert result.exit_code == 0, result.output
    assert output.read_bytes().startswith(b"%PDF")


def test_pdf_default_name(cli_runner, temp_store, sample_client):
    invoice_id = create(cli_runner, temp_store.database_path, sample_client.id)
    with cli_runner.isolated_filesystem():
        result = run(cli_runner, temp_store.database_path, "invoice", "pdf", invoice_id)
        assert re.search(r"Wrote invoice_INV-\d{4}-0001\.pdf", result.output)
