"""
Receipt service - the CRUD contract over a record store.

The service is the only place aging fields are computed; values submitted
by clients are ignored.
"""
from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Callable, Optional

from app.errors import ValidationError
from app.tracker.pipeline.aging import compute_aging, normalize_order_date
from app.tracker.pipeline.alerts import ALERT_FROM
from app.tracker.pipeline.classifier import classify
from app.tracker.schemas import (
    DeleteResult,
    Receipt,
    ReceiptCreate,
    ReceiptDraft,
    ReceiptUpdate,
    Stats,
    Status,
    Tier,
)
from app.tracker.store import ReceiptStore

logger = logging.getLogger(__name__)

Today = Callable[[], date]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def fixed_today(day: Optional[date]) -> Today:
    if day is None:
        return utc_today
    return lambda: day


class ReceiptService:
    def __init__(self, store: ReceiptStore, today: Optional[Today] = None):
        self.store = store
        self.today = today or utc_today

    # ── create ────────────────────────────────────────────────────────────
    def create(self, req: ReceiptCreate) -> Receipt:
        if not req.image_src or not req.extracted_text:
            raise ValidationError("imageSrc and extractedText are required")

        order_date = normalize_order_date(req.order_date)
        if req.order_date and order_date != req.order_date.strip():
            logger.warning("Unparsable orderDate %r stored as N/A", req.order_date)
        aging = compute_aging(order_date, self.today())

        draft = ReceiptDraft(
            image_src=req.image_src,
            extracted_text=req.extracted_text,
            order_date=order_date,
            days_passed=aging.days_passed,
            days_left=aging.days_left,
            status=Status.PENDING,
            note="",
            file_name=req.file_name or f"receipt-{int(time.time() * 1000)}",
            updated_by="system",
        )
        receipt = self.store.insert(draft)
        logger.info("Receipt created: %s (orderDate=%s, daysPassed=%d)",
                    receipt.id, receipt.order_date, receipt.days_passed)
        return receipt

    # ── read ──────────────────────────────────────────────────────────────
    def list(self) -> list[Receipt]:
        receipts = self.store.list()
        logger.info("Fetched %d receipts", len(receipts))
        return receipts

    def get(self, receipt_id: str) -> Receipt:
        return self.store.get(receipt_id)

    # ── update / delete ───────────────────────────────────────────────────
    def update(self, receipt_id: str, req: ReceiptUpdate) -> Receipt:
        receipt = self.store.update(receipt_id, req.changes())
        logger.info("Receipt updated: %s (status=%s)", receipt_id, receipt.status.value)
        return receipt

    def delete(self, receipt_id: str) -> DeleteResult:
        self.store.delete(receipt_id)
        logger.info("Receipt deleted: %s", receipt_id)
        return DeleteResult(id=receipt_id)

    # ── aggregates ────────────────────────────────────────────────────────
    def stats(self) -> Stats:
        receipts = self.store.list()
        return Stats(
            total_receipts=len(receipts),
            pending_receipts=sum(1 for r in receipts if r.status == Status.PENDING),
            completed_receipts=sum(1 for r in receipts if r.status == Status.DONE),
            alert_receipts=sum(
                1 for r in receipts
                if r.status == Status.PENDING and r.days_passed >= ALERT_FROM
            ),
            overdue_receipts=sum(
                1 for r in receipts if classify(r.status, r.days_passed) == Tier.OVERDUE
            ),
        )

    def refresh_aging(self, reference: Optional[date] = None) -> int:
        """Recompute aging as of ``reference`` (default: today); returns rows changed."""
        reference = reference or self.today()
        changed = 0
        for receipt in self.store.list():
            aging = compute_aging(receipt.order_date, reference)
            if (aging.days_passed, aging.days_left) != (receipt.days_passed, receipt.days_left):
                self.store.set_aging(receipt.id, aging)
                changed += 1
        logger.info("Aging refreshed as of %s: %d receipt(s) changed", reference, changed)
        return changed
