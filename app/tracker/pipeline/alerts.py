"""
Alert scanner - selects pending receipts inside the alert window and renders
a summary grouped by urgency tier.
"""
from __future__ import annotations

import html
from datetime import date
from typing import Iterable

from app.tracker.pipeline.aging import WINDOW_DAYS
from app.tracker.pipeline.classifier import classify
from app.tracker.schemas import Receipt, Status, Tier

ALERT_FROM = 5

# (heading, tier) in display order; ``None`` collects the plain Day 5+ records
ALERT_GROUPS: list[tuple[str, Tier | None]] = [
    ("OVERDUE", Tier.OVERDUE),
    ("DUE SOON", Tier.DUE_SOON),
    ("Day 5+", None),
]


def is_alertable(receipt: Receipt) -> bool:
    return (
        receipt.status == Status.PENDING
        and ALERT_FROM <= receipt.days_passed <= WINDOW_DAYS
    )


def select_alerts(receipts: Iterable[Receipt]) -> list[Receipt]:
    return [r for r in receipts if is_alertable(r)]


def group_alerts(alerts: Iterable[Receipt]) -> dict[str, list[Receipt]]:
    grouped: dict[str, list[Receipt]] = {heading: [] for heading, _ in ALERT_GROUPS}
    for receipt in alerts:
        tier = classify(receipt.status, receipt.days_passed)
        for heading, group_tier in ALERT_GROUPS:
            if group_tier is None or group_tier == tier:
                grouped[heading].append(receipt)
                break
    return grouped


def _line(receipt: Receipt) -> str:
    name = html.escape(receipt.file_name)
    left = receipt.days_left
    when = f"{left} days left" if left >= 0 else f"{abs(left)} days past due"
    return f"• {name} (ordered {receipt.order_date}, day {receipt.days_passed}, {when})"


def render_summary(alerts: list[Receipt], today: date) -> str:
    """Render an HTML-flavoured chat message for ``alerts``."""
    header = f"<b>Receipt alerts for {today.isoformat()}</b>"
    if not alerts:
        return f"{header}\nNo pending receipts need attention."

    parts = [header, f"{len(alerts)} pending receipt(s) at day {ALERT_FROM}+"]
    for heading, receipts in group_alerts(alerts).items():
        if not receipts:
            continue
        parts.append("")
        parts.append(f"<b>{heading}</b> ({len(receipts)})")
        parts.extend(_line(r) for r in receipts)
    return "\n".join(parts)
