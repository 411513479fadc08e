"""
Shared pytest fixtures - isolated in-memory store + FastAPI TestClient.
"""
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.errors import UpstreamError
from app.main import app
from app.tracker.deps import get_extractor, get_service, get_sink
from app.tracker.notify import AlertSink
from app.tracker.service import ReceiptService
from app.tracker.store import InMemoryReceiptStore

TODAY = date(2025, 10, 24)


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start=datetime(2025, 10, 24, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


class RecordingSink(AlertSink):
    def __init__(self, result=True):
        self.result = result
        self.messages = []

    def send(self, message):
        self.messages.append(message)
        return self.result


class FakeExtractor:
    """Stands in for the model client; ``texts`` maps file name -> text."""

    def __init__(self, texts=None, dates=None, fail=()):
        self.texts = texts or {}
        self.dates = dates or {}
        self.fail = set(fail)
        self.calls = []

    def extract_text(self, content, mime_type):
        name = content.decode("utf-8")
        self.calls.append(name)
        if name in self.fail:
            raise UpstreamError("model call failed")
        return self.texts.get(name, f"text of {name}")

    def extract_order_date(self, text):
        return self.dates.get(text, "N/A")


@pytest.fixture()
def store():
    s = InMemoryReceiptStore(clock=TickingClock())
    s.open()
    yield s
    s.close()


@pytest.fixture()
def service(store):
    return ReceiptService(store, today=lambda: TODAY)


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def extractor():
    return FakeExtractor()


@pytest.fixture()
def client(service, sink, extractor):
    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_sink] = lambda: sink
    app.dependency_overrides[get_extractor] = lambda: extractor
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
