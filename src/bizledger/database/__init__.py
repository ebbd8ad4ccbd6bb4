"""Row store layer for bizledger application."""

from bizledger.database.base import SheetStore
from bizledger.database.factories import create_store

__all__ = ["SheetStore", "create_store"]
