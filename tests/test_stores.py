"""Tests for the row store backends.

Every test runs against both the SQLite and the workbook backend.
"""

import pytest
from openpyxl.utils.exceptions import IllegalCharacterError

from bizledger.database.factories import create_store
from bizledger.database.sqlalchemy_store import SQLAlchemySheetStore
from bizledger.database.workbook_store import WorkbookSheetStore


def _fill(store, table="Things"):
    store.ensure_table(table)
    store.append_rows(table, [["id", "name"], ["a", "Alpha"], ["b", "Beta"], ["c", "Gamma"]])


class TestRowStore:
    """Contract shared by all backends."""

    def test_missing_table_reads_empty(self, any_store):
        assert any_store.list_rows("Nope") == []

    def test_new_table_is_empty(self, any_store):
        any_store.ensure_table("Things")
        assert any_store.list_rows("Things") == []

    def test_ensure_table_is_idempotent(self, any_store):
        _fill(any_store)
        any_store.ensure_table("Things")
        assert len(any_store.list_rows("Things")) == 4

    def test_append_keeps_order(self, any_store):
        _fill(any_store)
        any_store.append_rows("Things", [["d", "Delta"]])
        assert [row[0] for row in any_store.list_rows("Things")] == ["id", "a", "b", "c", "d"]

    def test_update_rows_overwrites_in_place(self, any_store):
        _fill(any_store)
        any_store.update_rows("Things", 2, [["b", "Bravo"]])
        assert any_store.list_rows("Things")[2] == ["b", "Bravo"]

    def test_update_missing_row_raises(self, any_store):
        _fill(any_store)
        with pytest.raises(IndexError):
            any_store.update_rows("Things", 10, [["z", "Zulu"]])

    def test_delete_shifts_following_rows_up(self, any_store):
        _fill(any_store)
        any_store.delete_row("Things", 1)
        rows = any_store.list_rows("Things")
        assert [row[0] for row in rows] == ["id", "b", "c"]

        # Positions are contiguous again: row 1 is now "b"
        any_store.update_rows("Things", 1, [["b", "Bee"]])
        assert any_store.list_rows("Things")[1] == ["b", "Bee"]

    def test_append_after_delete(self, any_store):
        _fill(any_store)
        any_store.delete_row("Things", 3)
        any_store.append_rows("Things", [["d", "Delta"]])
        assert [row[0] for row in any_store.list_rows("Things")] == ["id", "a", "b", "d"]

    def test_write_to_missing_table_raises(self, any_store):
        with pytest.raises(LookupError):
            any_store.append_rows("Nope", [["x"]])

    def test_tables_are_independent(self, any_store):
        _fill(any_store, "One")
        _fill(any_store, "Two")
        any_store.delete_row("One", 1)
        assert len(any_store.list_rows("One")) == 3
        assert len(any_store.list_rows("Two")) == 4

    def test_formula_like_text_is_kept_as_text(self, any_store):
        any_store.ensure_table("Things")
        any_store.append_rows("Things", [["id", "note"], ["a", "=1+1"]])
        assert any_store.list_rows("Things")[1] == ["a", "=1+1"]


class TestBatch:
    """Tests for batched writes."""

    def test_batch_commits_all_writes(self, any_store):
        _fill(any_store)
        with any_store.batch():
            any_store.append_rows("Things", [["d", "Delta"]])
            any_store.delete_row("Things", 1)
        assert [row[0] for row in any_store.list_rows("Things")] == ["id", "b", "c", "d"]

    def test_failed_batch_leaves_table_unchanged(self, any_store):
        _fill(any_store)
        before = any_store.list_rows("Things")

        with pytest.raises(RuntimeError):
            with any_store.batch():
                any_store.append_rows("Things", [["d", "Delta"]])
                any_store.delete_row("Things", 1)
                raise RuntimeError("boom")

        assert any_store.list_rows("Things") == before

    def test_nested_batch_commits_once_at_outer_exit(self, any_store):
        _fill(any_store)
        with pytest.raises(RuntimeError):
            with any_store.batch():
                with any_store.batch():
                    any_store.append_rows("Things", [["d", "Delta"]])
                raise RuntimeError("boom")
        assert len(any_store.list_rows("Things")) == 4


class TestPersistence:
    """Data survives reopening the store file."""

    def test_sqlite_reopen(self, temp_store):
        _fill(temp_store)
        temp_store.close()
        reopened = SQLAlchemySheetStore(f"sqlite:///{temp_store.database_path}")
        assert reopened.list_rows("Things")[3] == ["c", "Gamma"]
        reopened.close()

    def test_workbook_reopen(self, tmp_path):
        path = tmp_path / "books.xlsx"
        store = WorkbookSheetStore(path)
        _fill(store)
        reopened = WorkbookSheetStore(path)
        assert reopened.list_rows("Things") == store.list_rows("Things")

    def test_workbook_failed_write_is_not_saved_later(self, tmp_path):
        path = tmp_path / "books.xlsx"
        store = WorkbookSheetStore(path)
        _fill(store)

        with pytest.raises(IllegalCharacterError):
            store.append_rows("Things", [["d", "bell\x07"]])
        store.append_rows("Things", [["e", "Epsilon"]])

        reopened = WorkbookSheetStore(path)
        assert [row[0] for row in reopened.list_rows("Things")] == ["id", "a", "b", "c", "e"]


class TestFactory:
    """Tests for create_store."""

    def test_xlsx_selects_workbook(self, tmp_path):
        assert isinstance(create_store(str(tmp_path / "books.xlsx")), WorkbookSheetStore)

    def test_other_suffix_selects_sqlite(self, tmp_path):
        store = create_store(str(tmp_path / "books.db"))
        assert isinstance(store, SQLAlchemySheetStore)
        store.close()

    def test_env_var_is_used(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BIZLEDGER_STORE", str(tmp_path / "env.xlsx"))
        store = create_store()
        assert isinstance(store, WorkbookSheetStore)
        assert store.path == tmp_path / "env.xlsx"
