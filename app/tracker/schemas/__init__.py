from app.tracker.schemas.receipt import (  # noqa: F401
    NO_DATE,
    Aging,
    AlertReport,
    DeleteResult,
    Health,
    ItemResult,
    Receipt,
    ReceiptCreate,
    ReceiptDraft,
    ReceiptUpdate,
    ReceiptView,
    Stats,
    Status,
    Tier,
    UploadResponse,
)
