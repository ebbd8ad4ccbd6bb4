"""Export formatters for bizledger."""

from bizledger.export.csv_export import invoices_to_csv, transactions_to_csv
from bizledger.export.invoice_pdf import render_invoice_pdf

__all__ = ["transactions_to_csv", "invoices_to_csv", "render_invoice_pdf"]
