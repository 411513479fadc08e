"""
Receipt record stores. ``build_store`` picks the backend from configuration:
a configured ``DATABASE_URL`` selects the SQL store, otherwise receipts are
kept in memory.
"""
from app.config import Settings
from app.tracker.store.base import ReceiptStore
from app.tracker.store.memory import InMemoryReceiptStore
from app.tracker.store.sql import SqlReceiptStore

__all__ = ["ReceiptStore", "InMemoryReceiptStore", "SqlReceiptStore", "build_store"]


def build_store(settings: Settings) -> ReceiptStore:
    if settings.DATABASE_URL:
        return SqlReceiptStore(settings.DATABASE_URL, echo=settings.DEBUG)
    return InMemoryReceiptStore()
