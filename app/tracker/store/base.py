"""
Record store contract shared by the in-memory and SQL backends.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from app.errors import StoreUnavailableError
from app.tracker.schemas import Aging, Receipt, ReceiptDraft

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_receipt_id() -> str:
    return uuid.uuid4().hex


class ReceiptStore(ABC):
    """CRUD over receipts keyed by a store-assigned id.

    Every operation raises ``StoreUnavailableError`` while the store is
    closed and ``NotFoundError`` for unknown ids.
    """

    name = "abstract"

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def _ensure_open(self) -> None:
        if not self._open:
            raise StoreUnavailableError(f"{self.name} store is not available")

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def insert(self, draft: ReceiptDraft) -> Receipt: ...

    @abstractmethod
    def get(self, receipt_id: str) -> Receipt: ...

    @abstractmethod
    def list(self) -> list[Receipt]:
        """All receipts, newest ``uploaded_at`` first."""

    @abstractmethod
    def update(self, receipt_id: str, changes: dict) -> Receipt:
        """Apply ``changes`` and refresh ``updated_at``."""

    @abstractmethod
    def set_aging(self, receipt_id: str, aging: Aging) -> Receipt:
        """Overwrite the derived aging fields; ``updated_at`` is left alone."""

    @abstractmethod
    def delete(self, receipt_id: str) -> None: ...
