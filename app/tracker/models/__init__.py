from app.tracker.models.receipt import ReceiptModel  # noqa: F401
