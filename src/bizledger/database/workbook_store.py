"""Excel workbook row store: one worksheet per table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from bizledger.database.base import Row, SheetStore

logger = logging.getLogger(__name__)


class WorkbookSheetStore(SheetStore):
    """Row store backed by an ``.xlsx`` file.

    The workbook is held in memory and saved after every write, or once at
    the end of a ``batch()`` block. A write that fails reloads the file so
    no partial row survives into a later save.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._batch_depth = 0
        self._workbook = self._load()

    def _load(self) -> Workbook:
        if self.path.exists():
            return load_workbook(str(self.path))
        wb = Workbook()
        wb.remove(wb.active)
        return wb

    def _save(self) -> None:
        if self._batch_depth == 0:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._workbook.save(str(self.path))

    def _sheet(self, table: str) -> Worksheet:
        if table not in self._workbook.sheetnames:
            raise LookupError(f"Table '{table}' does not exist")
        return self._workbook[table]

    @staticmethod
    def _cell_text(value) -> str:
        return "" if value is None else str(value)

    @contextmanager
    def batch(self) -> Iterator["WorkbookSheetStore"]:
        """Save once at the end; on error, reload the file and drop the changes."""
        self._batch_depth += 1
        try:
            yield self
        except Exception:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                logger.warning(f"Discarding unsaved changes to {self.path}")
                self._workbook = self._load()
            raise
        else:
            self._batch_depth -= 1
            self._save()

    def ensure_table(self, table: str) -> None:
        if table in self._workbook.sheetnames:
            return
        with self.batch():
            self._workbook.create_sheet(title=table)
        logger.debug(f"Created worksheet {table} in {self.path}")

    def list_rows(self, table: str) -> list[Row]:
        if table not in self._workbook.sheetnames:
            return []
        ws = self._workbook[table]
        rows = []
        for values in ws.iter_rows(values_only=True):
            # A fresh worksheet reports a single empty row
            if all(value is None for value in values):
                continue
            rows.append([self._cell_text(value) for value in values])
        return rows

    def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        ws = self._sheet(table)
        # Worksheet.append writes after max_row, which is 1 on an empty sheet
        start = 1 if self._is_empty(ws) else ws.max_row + 1
        with self.batch():
            for offset, cells in enumerate(rows):
                self._write_row(ws, start + offset, cells)

    def update_rows(
        self, table: str, start_row: int, rows: Sequence[Sequence[str]]
    ) -> None:
        ws = self._sheet(table)
        with self.batch():
            for offset, cells in enumerate(rows):
                row_number = start_row + offset
                if row_number + 1 > ws.max_row or self._is_empty(ws):
                    raise IndexError(
                        f"Row {row_number} does not exist in table '{table}'"
                    )
                self._write_row(ws, row_number + 1, cells, clear_from=len(cells) + 1)

    def delete_row(self, table: str, row_number: int) -> None:
        ws = self._sheet(table)
        if row_number + 1 > ws.max_row or self._is_empty(ws):
            raise IndexError(f"Row {row_number} does not exist in table '{table}'")
        with self.batch():
            ws.delete_rows(row_number + 1)

    @staticmethod
    def _is_empty(ws: Worksheet) -> bool:
        return ws.max_row == 1 and all(cell.value is None for cell in ws[1])

    @staticmethod
    def _write_row(
        ws: Worksheet, excel_row: int, cells: Sequence[str], clear_from: int = 0
    ) -> None:
        for column, value in enumerate(cells, 1):
            cell = ws.cell(row=excel_row, column=column)
            cell.value = value
            # Keep text that starts with '=' from being stored as a formula
            cell.data_type = "s"
        if clear_from:
            for column in range(clear_from, ws.max_column + 1):
                ws.cell(row=excel_row, column=column).value = None
