"""Abstract row store interface.

A row store holds named tables of ordered string rows, the way a spreadsheet
holds worksheets. Row numbers are 0-indexed and include the header row, so
the first data row of a table is row 1.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Sequence

Row = list[str]


class SheetStore(ABC):
    """Abstract spreadsheet-style datastore for bizledger."""

    @abstractmethod
    def ensure_table(self, table: str) -> None:
        """Create the table if it does not exist."""
        pass

    @abstractmethod
    def list_rows(self, table: str) -> list[Row]:
        """Return every row of a table, header included.

        A missing table reads as empty.
        """
        pass

    @abstractmethod
    def append_rows(self, table: str, rows: Sequence[Sequence[str]]) -> None:
        """Add rows after the existing content."""
        pass

    @abstractmethod
    def update_rows(
        self, table: str, start_row: int, rows: Sequence[Sequence[str]]
    ) -> None:
        """Overwrite the contiguous range of rows starting at ``start_row``."""
        pass

    @abstractmethod
    def delete_row(self, table: str, row_number: int) -> None:
        """Remove one row; later rows shift up by one."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass

    @contextmanager
    def batch(self) -> Iterator["SheetStore"]:
        """Group writes so they are committed together.

        The default implementation offers no atomicity: every write is
        applied as soon as it is issued. Backends that can stage writes
        override this.
        """
        yield self
