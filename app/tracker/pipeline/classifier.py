"""
Status classifier - maps (status, daysPassed) to a display/alert tier.
"""
from __future__ import annotations

from app.tracker.pipeline.aging import WINDOW_DAYS
from app.tracker.schemas import Receipt, ReceiptView, Status, Tier

DUE_SOON_FROM = 9

TIER_LABELS: dict[Tier, str] = {
    Tier.OK: "OK",
    Tier.DUE_SOON: "DUE SOON",
    Tier.OVERDUE: "OVERDUE",
    Tier.COMPLETED: "COMPLETED",
}


def classify(status: Status, days_passed: int) -> Tier:
    if status == Status.DONE:
        return Tier.COMPLETED
    if days_passed > WINDOW_DAYS:
        return Tier.OVERDUE
    if DUE_SOON_FROM <= days_passed <= WINDOW_DAYS:
        return Tier.DUE_SOON
    return Tier.OK


def tier_label(tier: Tier) -> str:
    return TIER_LABELS[tier]


def remaining_label(status: Status, days_left: int) -> str:
    """``"N days remaining"`` / ``"N days past due"``; empty once done."""
    if status == Status.DONE:
        return ""
    if days_left >= 0:
        return f"{days_left} days remaining"
    return f"{abs(days_left)} days past due"


def to_view(receipt: Receipt) -> ReceiptView:
    tier = classify(receipt.status, receipt.days_passed)
    return ReceiptView(**receipt.model_dump(), tier=tier, tier_label=tier_label(tier))
