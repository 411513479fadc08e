"""
Alert endpoints.

GET  /api/alerts          - pending receipts at day 5-18
POST /api/alerts/notify   - scan and push the summary to the alert sink
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from app.tracker.deps import get_scanner
from app.tracker.pipeline.classifier import to_view
from app.tracker.scanner import AlertScanner
from app.tracker.schemas import AlertReport, ReceiptView

router = APIRouter()


@router.get("/alerts", response_model=List[ReceiptView])
def list_alerts(scanner: AlertScanner = Depends(get_scanner)):
    return [to_view(r) for r in scanner.scan()]


@router.post("/alerts/notify", response_model=AlertReport)
def notify_alerts(scanner: AlertScanner = Depends(get_scanner)):
    return scanner.run()
