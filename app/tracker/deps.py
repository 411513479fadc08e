"""
FastAPI dependencies. The objects live on ``app.state`` (set up in the
lifespan) so tests can swap them through ``dependency_overrides``.
"""
from fastapi import Depends, Request

from app.errors import StoreUnavailableError
from app.tracker.notify import AlertSink, NullSink
from app.tracker.pipeline.extraction import ExtractionClient
from app.tracker.scanner import AlertScanner
from app.tracker.service import ReceiptService


def get_service(request: Request) -> ReceiptService:
    service = getattr(request.app.state, "service", None)
    if service is None or not service.store.is_open:
        raise StoreUnavailableError("Receipt store not available")
    return service


def get_sink(request: Request) -> AlertSink:
    return getattr(request.app.state, "sink", None) or NullSink()


def get_scanner(
    service: ReceiptService = Depends(get_service),
    sink: AlertSink = Depends(get_sink),
) -> AlertScanner:
    return AlertScanner(service, sink)


def get_extractor(request: Request) -> ExtractionClient:
    extractor = getattr(request.app.state, "extractor", None)
    if extractor is None:
        extractor = ExtractionClient(api_key="", base_url="", model="")
    return extractor
