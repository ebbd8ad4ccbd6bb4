"""Tests for invoice PDF rendering."""

import re
from decimal import Decimal

from bizledger.config import BusinessInfo
from bizledger.export.invoice_pdf import render_invoice_pdf
from bizledger.domain.invoice import line_item


def _page_count(content: bytes) -> int:
    return len(re.findall(rb"/Type /Page[^s]", content))


class TestRenderInvoicePdf:
    """Tests for render_invoice_pdf."""

    def test_renders_pdf(self, sample_invoice, sample_client):
        content = render_invoice_pdf(
            sample_invoice, sample_client, BusinessInfo(name="Studio & Co", email="hi@studio.test")
        )
        assert content.startswith(b"%PDF")
        assert _page_count(content) == 1

    def test_missing_client_still_renders(self, sample_invoice):
        assert render_invoice_pdf(sample_invoice, None).startswith(b"%PDF")

    def test_notes_and_terms(self, invoice_service, sample_invoice):
        updated = invoice_service.update_invoice(
            sample_invoice.id, notes="Thanks <3\nSee you", terms="Net 30", today=sample_invoice.issue_date
        )
        assert render_invoice_pdf(updated, None).startswith(b"%PDF")

    def test_many_items_span_pages(self, invoice_service, sample_invoice):
        items = [line_item(f"Task {n}", Decimal("1"), Decimal("10")) for n in range(120)]
        updated = invoice_service.update_invoice(
            sample_invoice.id, items=items, today=sample_invoice.issue_date
        )
        assert _page_count(render_invoice_pdf(updated, None)) >= 2
