"""
Daily alert job: refresh aging for today, scan, deliver.

Run from cron (or any scheduler) with ``python -m app.tracker.job``. The job
opens its own store, so it needs ``DATABASE_URL``: a fresh in-memory store
would never see the server's receipts.
"""
import logging
from typing import Optional

from app.config import Settings, settings as default_settings
from app.errors import StoreUnavailableError
from app.tracker.notify import AlertSink, build_sink
from app.tracker.scanner import AlertScanner
from app.tracker.schemas import AlertReport
from app.tracker.service import ReceiptService, fixed_today
from app.tracker.store import InMemoryReceiptStore, ReceiptStore, build_store

logger = logging.getLogger(__name__)


def run_daily_scan(
    settings: Settings = default_settings,
    store: Optional[ReceiptStore] = None,
    sink: Optional[AlertSink] = None,
) -> AlertReport:
    """Scan ``store`` (or the configured database) and deliver the summary.

    Stores and sinks passed in by the caller are left open.
    """
    owns_store = store is None
    if owns_store:
        store = build_store(settings)
        if isinstance(store, InMemoryReceiptStore):
            logger.error("Daily scan needs DATABASE_URL; an in-memory store has no receipts")
            raise StoreUnavailableError("DATABASE_URL is not set")
        store.open()
    owns_sink = sink is None
    if owns_sink:
        sink = build_sink(settings)

    try:
        service = ReceiptService(store, today=fixed_today(settings.REFERENCE_DATE))
        report = AlertScanner(service, sink).run()
    finally:
        if owns_sink:
            sink.close()
        if owns_store:
            store.close()
    logger.info("Daily scan: %d alert(s), delivered=%s", report.count, report.delivered)
    return report


if __name__ == "__main__":
    logging.basicConfig(
        level=default_settings.LOG_LEVEL,
        format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
    )
    try:
        print(run_daily_scan().message)
    except StoreUnavailableError as e:
        raise SystemExit(f"Daily scan aborted: {e.message}")
