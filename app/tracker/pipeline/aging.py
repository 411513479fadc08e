"""
Aging calculator - elapsed days against the fixed 18-day window.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone

from app.tracker.schemas import NO_DATE, Aging

WINDOW_DAYS = 18

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_order_date(value: object) -> str:
    """Return ``value`` as ``YYYY-MM-DD``, or ``N/A`` when it is not a real date."""
    if not isinstance(value, str) or not value:
        return NO_DATE
    value = value.strip()
    if not _ISO_DATE.match(value):
        return NO_DATE
    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
    except ValueError:
        return NO_DATE


def compute_aging(order_date: str, reference: date | datetime) -> Aging:
    """Compute ``daysPassed`` / ``daysLeft`` for ``order_date`` as of ``reference``.

    ``order_date`` must already be normalized. A ``datetime`` reference is
    measured from UTC midnight of the order date and rounded up to whole days.
    """
    if order_date == NO_DATE:
        return Aging(days_passed=0, days_left=WINDOW_DAYS)

    ordered = date.fromisoformat(order_date)
    if isinstance(reference, datetime):
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        start = datetime.combine(ordered, time.min, tzinfo=timezone.utc)
        days_passed = math.ceil((reference - start).total_seconds() / 86400)
    else:
        days_passed = (reference - ordered).days

    return Aging(days_passed=days_passed, days_left=WINDOW_DAYS - days_passed)
