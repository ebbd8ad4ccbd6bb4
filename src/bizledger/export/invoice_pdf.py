"""Invoice PDF rendering with reportlab."""

import io
import logging
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from bizledger.config import BusinessInfo
from bizledger.domain.entities import Client, Invoice
from bizledger.utils.amount_parser import format_currency

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "draft": colors.Color(156 / 255, 163 / 255, 175 / 255),
    "sent": colors.Color(59 / 255, 130 / 255, 246 / 255),
    "paid": colors.Color(34 / 255, 197 / 255, 94 / 255),
    "overdue": colors.Color(239 / 255, 68 / 255, 68 / 255),
    "cancelled": colors.Color(107 / 255, 114 / 255, 128 / 255),
}
DEFAULT_STATUS_COLOR = colors.Color(100 / 255, 100 / 255, 100 / 255)

BRAND_BLUE = colors.Color(30 / 255, 58 / 255, 138 / 255)
MUTED = colors.Color(100 / 255, 100 / 255, 100 / 255)
BALANCE_RED = colors.Color(239 / 255, 68 / 255, 68 / 255)
HEADER_FILL = colors.HexColor("#F3F4F6")


class NumberedCanvas(canvas.Canvas):
    """Canvas that stamps "Page X of Y" on every page once the total is known."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(page_count)
            super().showPage()
        super().save()

    def _draw_page_number(self, page_count: int) -> None:
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.Color(150 / 255, 150 / 255, 150 / 255))
        self.drawCentredString(width / 2, 10 * mm, f"Page {self._pageNumber} of {page_count}")


def _format_date(value) -> str:
    return value.strftime("%b %d, %Y") if value is not None else ""


def _client_lines(client: Optional[Client]) -> list[str]:
    if client is None:
        return []
    lines = [client.name]
    if client.email:
        lines.append(client.email)
    if client.phone:
        lines.append(client.phone)
    if client.address:
        locality = ", ".join(part for part in (client.city, client.state, client.zip_code) if part)
        lines.extend(line for line in (client.address, locality, client.country) if line)
    return lines


def _quantity(value) -> str:
    return format(value.normalize(), "f")


def render_invoice_pdf(
    invoice: Invoice, client: Optional[Client], business: Optional[BusinessInfo] = None
) -> bytes:
    """Render an invoice as a PDF document.

    Args:
        invoice: Invoice with items attached
        client: Billed client, or None if it no longer exists
        business: Sender details for the header (defaults to BusinessInfo())

    Returns:
        PDF file contents
    """
    business = business or BusinessInfo()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=f"Invoice {invoice.invoice_number}",
    )

    styles = getSampleStyleSheet()
    business_style = ParagraphStyle(
        "Business", parent=styles["Title"], fontSize=20, textColor=BRAND_BLUE, alignment=0
    )
    title_style = ParagraphStyle("InvoiceTitle", parent=styles["Title"], fontSize=24, alignment=2)
    muted_style = ParagraphStyle("Muted", parent=styles["Normal"], fontSize=10, textColor=MUTED)
    meta_style = ParagraphStyle("Meta", parent=muted_style, alignment=2)
    heading_style = ParagraphStyle("Heading", parent=styles["Heading3"], fontSize=12, spaceAfter=4)
    notes_style = ParagraphStyle("Notes", parent=styles["Normal"], fontSize=9, textColor=MUTED)

    elements = []

    # Business header on the left, invoice metadata on the right
    left = [Paragraph(escape(business.name), business_style)]
    left += [
        Paragraph(escape(line), muted_style)
        for line in (business.email, business.phone, business.address)
        if line
    ]
    right = [
        Paragraph("INVOICE", title_style),
        Paragraph(f"Invoice #: {escape(invoice.invoice_number)}", meta_style),
        Paragraph(f"Issue Date: {_format_date(invoice.issue_date)}", meta_style),
        Paragraph(f"Due Date: {_format_date(invoice.due_date)}", meta_style),
    ]
    badge = Table([[invoice.status.capitalize()]], colWidths=[30 * mm], hAlign="RIGHT")
    badge.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), STATUS_COLORS.get(invoice.status, DEFAULT_STATUS_COLOR)),
        ("TEXTCOLOR", (0, 0), (-1, -1), colors.white),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ]))
    right.append(badge)

    header = Table([[left, right]], colWidths=[doc.width / 2, doc.width / 2])
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    elements.append(header)
    elements.append(Spacer(1, 10 * mm))

    elements.append(Paragraph("Bill To:", heading_style))
    for line in _client_lines(client):
        elements.append(Paragraph(escape(line), muted_style))
    elements.append(Spacer(1, 8 * mm))

    item_rows = [["Description", "Quantity", "Rate", "Amount"]]
    for item in invoice.items:
        item_rows.append([
            Paragraph(escape(item.description), styles["Normal"]),
            _quantity(item.quantity),
            format_currency(item.unit_price),
            format_currency(item.amount),
        ])
    items_table = Table(
        item_rows,
        colWidths=[doc.width * 0.5, doc.width * 0.15, doc.width * 0.175, doc.width * 0.175],
        repeatRows=1,
    )
    items_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 8 * mm))

    totals_rows = [
        ["Subtotal:", format_currency(invoice.subtotal)],
        [f"Tax ({invoice.tax_rate.normalize():f}%):", format_currency(invoice.tax)],
        ["Total:", format_currency(invoice.total)],
        ["Paid:", format_currency(invoice.paid_amount)],
        ["Balance Due:", format_currency(invoice.balance_due)],
    ]
    totals = Table(totals_rows, colWidths=[40 * mm, 35 * mm], hAlign="RIGHT")
    totals.setStyle(TableStyle([
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("LINEABOVE", (0, 2), (-1, 2), 0.5, colors.black),
        ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
        ("FONTSIZE", (0, 2), (-1, 2), 12),
        ("FONTNAME", (0, 4), (-1, 4), "Helvetica-Bold"),
        ("TEXTCOLOR", (0, 4), (-1, 4), BALANCE_RED),
    ]))
    elements.append(totals)

    for label, text in (("Notes:", invoice.notes), ("Terms:", invoice.terms)):
        if text:
            elements.append(Spacer(1, 8 * mm))
            elements.append(Paragraph(label, heading_style))
            elements.append(Paragraph(escape(text).replace("\n", "<br/>"), notes_style))

    doc.build(elements, canvasmaker=NumberedCanvas)
    logger.info(f"Rendered PDF for invoice {invoice.invoice_number}")
    return buffer.getvalue()
