"""Factory functions for creating row store instances."""

import os
from pathlib import Path
from typing import Optional

from bizledger.config import STORE_ENV
from bizledger.database.base import SheetStore
from bizledger.database.sqlalchemy_store import SQLAlchemySheetStore
from bizledger.database.workbook_store import WorkbookSheetStore

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")


def default_store_path() -> str:
    """Return ~/.bizledger/bizledger.db, creating the directory."""
    store_dir = Path.home() / ".bizledger"
    store_dir.mkdir(exist_ok=True)
    return str(store_dir / "bizledger.db")


def create_sqlite_store(database_path: str) -> SQLAlchemySheetStore:
    """Create a SQLite-backed row store at ``database_path``."""
    return SQLAlchemySheetStore(f"sqlite:///{database_path}")


def create_store(store_path: Optional[str] = None) -> SheetStore:
    """Create a row store instance.

    Args:
        store_path: Path to the store file. If None, checks the BIZLEDGER_STORE
            environment variable, then defaults to ~/.bizledger/bizledger.db.
            A path ending in .xlsx selects the Excel workbook backend; anything
            else is opened as a SQLite database.

    Returns:
        SheetStore instance
    """
    if store_path is None:
        store_path = os.environ.get(STORE_ENV)

    if store_path is None:
        store_path = default_store_path()

    if Path(store_path).suffix.lower() in WORKBOOK_SUFFIXES:
        return WorkbookSheetStore(store_path)
    return create_sqlite_store(store_path)
