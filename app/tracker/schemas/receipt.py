"""
Receipt tracker contracts.

Every layer (store, service, pipeline, API) produces and consumes these
Pydantic v2 models. JSON keys are camelCase on the wire.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


NO_DATE = "N/A"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Status(str, Enum):
    PENDING = "Pending"
    DONE = "Done"
    DELAYED = "Delayed"


class Tier(str, Enum):
    OK = "OK"
    DUE_SOON = "DUE_SOON"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"


# ---------------------------------------------------------------------------
# Core entity
# ---------------------------------------------------------------------------

class Aging(CamelModel):
    """Derived ``daysPassed`` / ``daysLeft`` pair."""
    days_passed: int
    days_left: int


class ReceiptDraft(CamelModel):
    """A receipt before the store has assigned its id and timestamps."""
    image_src: str
    extracted_text: str
    order_date: str = NO_DATE
    days_passed: int = 0
    days_left: int = 18
    status: Status = Status.PENDING
    note: str = ""
    file_name: str
    updated_by: str = "system"


class Receipt(ReceiptDraft):
    id: str
    uploaded_at: datetime
    updated_at: datetime


class ReceiptView(Receipt):
    """Receipt as served by the API, with its display tier."""
    tier: Tier
    tier_label: str


# ---------------------------------------------------------------------------
# API request / response envelopes
# ---------------------------------------------------------------------------

class ReceiptCreate(CamelModel):
    image_src: Optional[str] = None
    extracted_text: Optional[str] = None
    order_date: Optional[str] = None
    # Accepted for compatibility, always recomputed server-side.
    days_passed: Optional[int] = None
    days_left: Optional[int] = None
    file_name: Optional[str] = None


class ReceiptUpdate(CamelModel):
    """Partial update; ``None`` means "leave unchanged"."""
    status: Optional[Status] = None
    note: Optional[str] = None
    updated_by: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class DeleteResult(CamelModel):
    success: bool = True
    message: str = "Receipt deleted"
    id: str


class Stats(CamelModel):
    total_receipts: int = 0
    pending_receipts: int = 0
    completed_receipts: int = 0
    alert_receipts: int = 0
    overdue_receipts: int = 0


class ItemResult(CamelModel):
    """Outcome of one file in a batch upload: a receipt or a reason."""
    file_name: str
    ok: bool
    receipt: Optional[ReceiptView] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, file_name: str, receipt: ReceiptView) -> "ItemResult":
        return cls(file_name=file_name, ok=True, receipt=receipt)

    @classmethod
    def failure(cls, file_name: str, reason: str) -> "ItemResult":
        return cls(file_name=file_name, ok=False, error=reason)


class UploadResponse(CamelModel):
    results: list[ItemResult] = Field(default_factory=list)
    succeeded: int = 0
    failed: int = 0


class AlertReport(CamelModel):
    count: int
    message: str
    delivered: bool


class Health(CamelModel):
    status: str = "ok"
    message: str = "Receipt tracker is running"
    store: str
    timestamp: datetime
