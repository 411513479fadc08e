"""
Receipt Tracker Backend - FastAPI application entry-point.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.errors import (
    StoreUnavailableError,
    TrackerError,
    generic_exception_handler,
    http_exception_handler,
    tracker_error_handler,
    validation_exception_handler,
)
from app.tracker.notify import build_sink
from app.tracker.pipeline.extraction import ExtractionClient
from app.tracker.schemas import Health
from app.tracker.service import ReceiptService, fixed_today
from app.tracker.store import build_store

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    try:
        store.open()
    except StoreUnavailableError as e:
        # keep serving; data endpoints answer 503 until restart
        logger.error("Store failed to open: %s", e.message)

    app.state.service = ReceiptService(store, today=fixed_today(settings.REFERENCE_DATE))
    app.state.sink = build_sink(settings)
    app.state.extractor = ExtractionClient.from_settings(settings)
    logger.info(
        "Receipt store: %s (%s)", store.name, "connected" if store.is_open else "unavailable"
    )
    if not app.state.extractor.configured:
        logger.warning("EXTRACTION_API_KEY not set - image uploads will fail")

    yield

    app.state.sink.close()
    store.close()
    logger.info("Shutting down")


app = FastAPI(
    title="Receipt Tracker",
    description="Receipt image → extracted text → order date → aging alerts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TrackerError, tracker_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", response_model=Health)
async def health_check(request: Request):
    service = getattr(request.app.state, "service", None)
    if service is None:
        store = "unavailable"
    else:
        store = service.store.name if service.store.is_open else "unavailable"
    return Health(store=store, timestamp=datetime.now(timezone.utc))


# ── Register API routers ─────────────────────────────────────────────────
from app.tracker.routers.receipts import router as receipts_router  # noqa: E402
from app.tracker.routers.alerts import router as alerts_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(alerts_router, prefix="/api", tags=["Alerts"])
