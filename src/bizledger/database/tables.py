"""Entity-level access to a single table of a row store.

Row numbers never leave this module: every positional write re-reads the
table and locates the target row by its id immediately before writing.
"""

import logging
from typing import Callable, Generic, Optional, Sequence, TypeVar

from bizledger.database.base import Row, SheetStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# The header occupies row 0
HEADER_ROWS = 1


class EntityTable(Generic[T]):
    """CRUD over one named table keyed by its ``id`` column."""

    def __init__(
        self,
        store: SheetStore,
        name: str,
        headers: Sequence[str],
        to_row: Callable[[T], list[str]],
        from_row: Callable[[Sequence[str], Sequence[str]], T],
    ):
        """Initialize entity table.

        Args:
            store: Row store instance
            name: Table name
            headers: Current field names, in column order
            to_row: Entity -> row encoder
            from_row: (row, stored headers) -> entity decoder
        """
        self.store = store
        self.name = name
        self.headers = tuple(headers)
        self.to_row = to_row
        self.from_row = from_row

    def initialize(self) -> None:
        """Ensure the table exists and carries the current header row.

        Safe to call before every write.
        """
        self.store.ensure_table(self.name)
        rows = self.store.list_rows(self.name)
        if not rows:
            self.store.append_rows(self.name, [list(self.headers)])
            return

        stored = tuple(cell for cell in rows[0] if cell)
        if stored == self.headers:
            return
        if len(stored) < len(self.headers) and self.headers[: len(stored)] == stored:
            logger.info(
                f"Upgrading header of table {self.name} "
                f"with {len(self.headers) - len(stored)} new column(s)"
            )
            self.store.update_rows(self.name, 0, [list(self.headers)])
            return
        logger.warning(f"Table {self.name} has an unrecognized header: {list(stored)}")

    def _read(self) -> tuple[tuple[str, ...], list[Row]]:
        rows = self.store.list_rows(self.name)
        if not rows:
            return self.headers, []
        header = list(rows[0])
        while header and not header[-1]:
            header.pop()
        return tuple(header), rows[HEADER_ROWS:]

    @staticmethod
    def _id_column(header: Sequence[str]) -> int:
        return header.index("id") if "id" in header else 0

    def _encode(self, entity: T, header: Sequence[str]) -> list[str]:
        """Encode ``entity`` in the column order of the stored header.

        Raises:
            ValueError: If the stored header is neither a prefix nor a
                reordering of the current one
        """
        cells = self.to_row(entity)
        header = tuple(header)
        if self.headers[: len(header)] == header:
            return cells
        if len(header) == len(self.headers) and set(header) == set(self.headers):
            by_name = dict(zip(self.headers, cells))
            return [by_name[name] for name in header]
        raise ValueError(
            f"Table {self.name} has an unrecognized header: {list(header)}"
        )

    def list_all(self) -> list[T]:
        """Decode every data row; an empty or header-only table gives []."""
        header, body = self._read()
        return [self.from_row(row, header) for row in body]

    def get(self, entity_id: str) -> Optional[T]:
        """Linear scan for the entity with ``entity_id``."""
        header, body = self._read()
        column = self._id_column(header)
        for row in body:
            if len(row) > column and row[column] == entity_id:
                return self.from_row(row, header)
        return None

    def _position(self, entity_id: str) -> tuple[tuple[str, ...], Optional[int]]:
        header, body = self._read()
        column = self._id_column(header)
        for index, row in enumerate(body):
            if len(row) > column and row[column] == entity_id:
                return header, HEADER_ROWS + index
        return header, None

    def locate(self, entity_id: str) -> Optional[int]:
        """Return the current row number of ``entity_id``, or None."""
        return self._position(entity_id)[1]

    def append(self, entities: Sequence[T]) -> None:
        """Append entities after the existing rows."""
        if not entities:
            return
        header, _ = self._read()
        rows = [self._encode(entity, header) for entity in entities]
        self.store.append_rows(self.name, rows)

    def replace(self, entity_id: str, entity: T) -> bool:
        """Overwrite the row holding ``entity_id``. Returns False if absent."""
        header, row_number = self._position(entity_id)
        if row_number is None:
            return False
        self.store.update_rows(self.name, row_number, [self._encode(entity, header)])
        return True

    def remove(self, entity_id: str) -> bool:
        """Delete the row holding ``entity_id``. Returns False if absent."""
        row_number = self.locate(entity_id)
        if row_number is None:
            return False
        self.store.delete_row(self.name, row_number)
        return True
