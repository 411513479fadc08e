"""
Alert delivery, scanner and daily job.
"""
import json
from datetime import date

import httpx
import pytest

from app.config import Settings
from app.errors import StoreUnavailableError
from app.tracker.job import run_daily_scan
from app.tracker.notify import AlertSink, NullSink, TelegramSink, build_sink
from app.tracker.scanner import AlertScanner
from app.tracker.schemas import ReceiptCreate, ReceiptUpdate, Status
from app.tracker.service import ReceiptService
from app.tracker.store import SqlReceiptStore


def _telegram(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramSink("TOKEN", "42", client=client)


class TestSinks:
    def test_telegram_posts_html_message(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        assert _telegram(handler).send("<b>hi</b>") is True
        assert seen[0].url.path == "/botTOKEN/sendMessage"
        assert json.loads(seen[0].content) == {
            "chat_id": "42",
            "text": "<b>hi</b>",
            "parse_mode": "HTML",
        }

    def test_telegram_http_error_is_swallowed(self):
        sink = _telegram(lambda request: httpx.Response(502))
        assert sink.send("x") is False

    def test_telegram_transport_error_is_swallowed(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        assert _telegram(handler).send("x") is False

    def test_null_sink(self):
        assert NullSink().send("x") is False

    def test_build_sink(self):
        assert isinstance(build_sink(Settings(TELEGRAM_BOT_TOKEN="", TELEGRAM_CHAT_ID="")), NullSink)
        sink = build_sink(Settings(TELEGRAM_BOT_TOKEN="t", TELEGRAM_CHAT_ID="c"))
        assert isinstance(sink, TelegramSink)

    def test_sink_requires_send(self):
        with pytest.raises(TypeError):
            AlertSink()

    def test_close_releases_own_client(self):
        sink = TelegramSink("t", "c")
        sink.close()
        assert sink._client.is_closed

    def test_close_leaves_injected_client(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        TelegramSink("t", "c", client=client).close()
        assert not client.is_closed
        client.close()


class TestScanner:
    def test_scan_and_run(self, service, sink):
        service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-12",
                                     file_name="bag.jpg"))
        service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-22"))
        scanner = AlertScanner(service, sink)
        assert [r.file_name for r in scanner.scan()] == ["bag.jpg"]

        report = scanner.run()
        assert report.count == 1
        assert report.delivered is True
        assert "<b>DUE SOON</b> (1)" in report.message
        assert sink.messages == [report.message]

    def test_raising_sink_does_not_fail_scan(self, service):
        class Broken(NullSink):
            def send(self, message):
                raise RuntimeError("sink exploded")

        service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-19"))
        report = AlertScanner(service, Broken()).run()
        assert report.count == 1
        assert report.delivered is False

    def test_run_refreshes_aging_first(self, store, sink):
        creating = ReceiptService(store, today=lambda: date(2025, 10, 1))
        receipt = creating.create(
            ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-01")
        )
        assert receipt.days_passed == 0

        later = ReceiptService(store, today=lambda: date(2025, 10, 7))
        report = AlertScanner(later, sink).run()
        assert report.count == 1
        assert store.get(receipt.id).days_passed == 6


class TestAgingRefresh:
    def test_refresh_recomputes_for_new_day(self, store):
        service = ReceiptService(store, today=lambda: date(2025, 10, 20))
        dated = service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-16"))
        undated = service.create(ReceiptCreate(image_src="x", extracted_text="y"))
        assert dated.days_passed == 4

        assert service.refresh_aging(date(2025, 10, 25)) == 1
        refreshed = service.get(dated.id)
        assert (refreshed.days_passed, refreshed.days_left) == (9, 9)
        assert refreshed.updated_at == dated.updated_at
        assert service.get(undated.id).days_passed == 0

    def test_daily_job(self, store, sink):
        service = ReceiptService(store, today=lambda: date(2025, 10, 1))
        fresh = service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-01"))
        done = service.create(ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-01"))
        service.update(done.id, ReceiptUpdate(status=Status.DONE))
        assert fresh.days_passed == 0

        report = run_daily_scan(Settings(REFERENCE_DATE=date(2025, 10, 8)), store=store, sink=sink)
        assert report.count == 1
        assert report.delivered is True
        assert "Day 5+" in sink.messages[0]
        assert store.is_open
        assert len(store.list()) == 2

    def test_daily_job_refuses_in_memory_store(self, sink):
        with pytest.raises(StoreUnavailableError):
            run_daily_scan(Settings(DATABASE_URL=None), sink=sink)
        assert sink.messages == []

    def test_daily_job_on_database(self, tmp_path, sink):
        url = f"sqlite:///{tmp_path}/tracker.db"
        store = SqlReceiptStore(url)
        store.open()
        ReceiptService(store, today=lambda: date(2025, 10, 1)).create(
            ReceiptCreate(image_src="x", extracted_text="y", order_date="2025-10-01")
        )
        store.close()

        settings = Settings(DATABASE_URL=url, REFERENCE_DATE=date(2025, 10, 10))
        report = run_daily_scan(settings, sink=sink)
        assert report.count == 1
        assert len(sink.messages) == 1

        store.open()
        try:
            assert store.list()[0].days_passed == 9
        finally:
            store.close()
