"""
In-memory receipt store. Data lives only as long as the store is open.
"""
from __future__ import annotations

import itertools
import logging
import threading

from app.errors import NotFoundError
from app.tracker.schemas import Aging, Receipt, ReceiptDraft
from app.tracker.store.base import ReceiptStore, new_receipt_id

logger = logging.getLogger(__name__)


class InMemoryReceiptStore(ReceiptStore):
    """Dict-backed store.

    Every read-modify-write runs under one lock, so a delete can never be
    undone by an update or aging refresh that looked the record up first.
    """

    name = "memory"

    def __init__(self, clock=None):
        super().__init__(clock)
        self._records: dict[str, Receipt] = {}
        self._order: dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def open(self) -> None:
        with self._lock:
            if self._open:
                return
            self._records = {}
            self._order = {}
            self._open = True
        logger.info("In-memory store opened (data will not persist)")

    def close(self) -> None:
        with self._lock:
            self._records = {}
            self._order = {}
            self._open = False

    def _lookup(self, receipt_id: str) -> Receipt:
        # caller holds self._lock
        self._ensure_open()
        record = self._records.get(receipt_id)
        if record is None:
            raise NotFoundError("Receipt not found")
        return record

    def insert(self, draft: ReceiptDraft) -> Receipt:
        now = self.clock()
        with self._lock:
            self._ensure_open()
            receipt_id = new_receipt_id()
            record = Receipt(**draft.model_dump(), id=receipt_id, uploaded_at=now, updated_at=now)
            self._records[receipt_id] = record
            self._order[receipt_id] = next(self._seq)
        return record.model_copy()

    def get(self, receipt_id: str) -> Receipt:
        with self._lock:
            return self._lookup(receipt_id).model_copy()

    def list(self) -> list[Receipt]:
        with self._lock:
            self._ensure_open()
            rows = sorted(
                self._records.values(),
                key=lambda r: (r.uploaded_at, self._order[r.id]),
                reverse=True,
            )
        return [r.model_copy() for r in rows]

    def update(self, receipt_id: str, changes: dict) -> Receipt:
        now = self.clock()
        with self._lock:
            record = self._lookup(receipt_id)
            updated = record.model_copy(update={**changes, "updated_at": now})
            self._records[receipt_id] = updated
        return updated.model_copy()

    def set_aging(self, receipt_id: str, aging: Aging) -> Receipt:
        with self._lock:
            record = self._lookup(receipt_id)
            updated = record.model_copy(
                update={"days_passed": aging.days_passed, "days_left": aging.days_left}
            )
            self._records[receipt_id] = updated
        return updated.model_copy()

    def delete(self, receipt_id: str) -> None:
        with self._lock:
            self._lookup(receipt_id)
            del self._records[receipt_id]
            del self._order[receipt_id]
