"""
Alert scanner - scan the store, render the summary, hand it to the sink.
"""
from __future__ import annotations

import logging

from app.tracker.notify import AlertSink, NullSink
from app.tracker.pipeline.alerts import render_summary, select_alerts
from app.tracker.schemas import AlertReport, Receipt
from app.tracker.service import ReceiptService

logger = logging.getLogger(__name__)


class AlertScanner:
    def __init__(self, service: ReceiptService, sink: AlertSink | None = None):
        self.service = service
        self.sink = sink or NullSink()

    def scan(self) -> list[Receipt]:
        alerts = select_alerts(self.service.list())
        logger.info("Found %d alerts", len(alerts))
        return alerts

    def run(self) -> AlertReport:
        """Bring aging up to today, then scan and deliver the summary."""
        self.service.refresh_aging()
        alerts = self.scan()
        message = render_summary(alerts, self.service.today())
        try:
            delivered = self.sink.send(message)
        except Exception:
            # delivery must never fail the scan
            logger.exception("Alert delivery raised")
            delivered = False
        return AlertReport(count=len(alerts), message=message, delivered=delivered)
