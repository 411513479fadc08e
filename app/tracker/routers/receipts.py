"""
Receipt API endpoints.

GET    /api/receipts          - list receipts, newest first
POST   /api/receipts          - create a receipt from extracted text
POST   /api/receipts/upload   - extract + create from image files
GET    /api/receipts/{id}     - get one receipt
PUT    /api/receipts/{id}     - update status / note
DELETE /api/receipts/{id}     - delete a receipt
GET    /api/stats             - aggregate counts
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from app.config import settings
from app.tracker.deps import get_extractor, get_service
from app.tracker.pipeline import UploadedImage, process_uploads
from app.tracker.pipeline.classifier import to_view
from app.tracker.pipeline.extraction import ExtractionClient
from app.tracker.schemas import (
    DeleteResult,
    ReceiptCreate,
    ReceiptUpdate,
    ReceiptView,
    Stats,
    UploadResponse,
)
from app.tracker.service import ReceiptService

logger = logging.getLogger(__name__)
router = APIRouter()


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=List[ReceiptView])
def list_receipts(service: ReceiptService = Depends(get_service)):
    return [to_view(r) for r in service.list()]


# ── POST /api/receipts ───────────────────────────────────────────────────
@router.post("/receipts", response_model=ReceiptView, status_code=201)
def create_receipt(req: ReceiptCreate, service: ReceiptService = Depends(get_service)):
    return to_view(service.create(req))


def read_upload(upload: UploadFile, max_bytes: int) -> UploadedImage:
    """Read at most one byte past the limit so oversized files are never fully buffered."""
    content = upload.file.read(max_bytes + 1)
    logger.info("UPLOAD: name=%s size=%d bytes", upload.filename, len(content))
    return UploadedImage(upload.filename or "upload", content, upload.content_type or "")


# ── POST /api/receipts/upload ────────────────────────────────────────────
@router.post("/receipts/upload", response_model=UploadResponse)
def upload_receipts(
    files: List[UploadFile] = File(...),
    service: ReceiptService = Depends(get_service),
    extractor: ExtractionClient = Depends(get_extractor),
):
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    images = [read_upload(f, max_bytes) for f in files]
    results = process_uploads(images, extractor, service, max_bytes=max_bytes)
    succeeded = sum(1 for r in results if r.ok)
    return UploadResponse(results=results, succeeded=succeeded, failed=len(results) - succeeded)


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=ReceiptView)
def get_receipt(receipt_id: str, service: ReceiptService = Depends(get_service)):
    return to_view(service.get(receipt_id))


# ── PUT /api/receipts/{receipt_id} ───────────────────────────────────────
@router.put("/receipts/{receipt_id}", response_model=ReceiptView)
def update_receipt(
    receipt_id: str,
    req: ReceiptUpdate,
    service: ReceiptService = Depends(get_service),
):
    return to_view(service.update(receipt_id, req))


# ── DELETE /api/receipts/{receipt_id} ────────────────────────────────────
@router.delete("/receipts/{receipt_id}", response_model=DeleteResult)
def delete_receipt(receipt_id: str, service: ReceiptService = Depends(get_service)):
    return service.delete(receipt_id)


# ── GET /api/stats ───────────────────────────────────────────────────────
@router.get("/stats", response_model=Stats)
def get_stats(service: ReceiptService = Depends(get_service)):
    return service.stats()
