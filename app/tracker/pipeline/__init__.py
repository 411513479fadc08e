"""
Receipt upload pipeline.

Processes uploaded images one at a time: extract text → find order date →
create receipt. A failing file yields an error result and the batch moves on.
"""
from __future__ import annotations

import base64
import logging
from typing import Iterable, NamedTuple, Protocol

from app.errors import TrackerError, ValidationError
from app.tracker.pipeline.classifier import to_view
from app.tracker.schemas import ItemResult, Receipt, ReceiptCreate

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".heic")


class UploadedImage(NamedTuple):
    file_name: str
    content: bytes
    content_type: str


class Extractor(Protocol):
    def extract_text(self, content: bytes, mime_type: str) -> str: ...

    def extract_order_date(self, text: str) -> str: ...


class ReceiptCreator(Protocol):
    def create(self, req: ReceiptCreate) -> Receipt: ...


def _check_image(image: UploadedImage, max_bytes: int) -> None:
    if not image.content:
        raise ValidationError("empty file")
    if len(image.content) > max_bytes:
        raise ValidationError(f"file too large (over {max_bytes} bytes)")
    is_image = (image.content_type or "").startswith("image/")
    if not is_image and not image.file_name.lower().endswith(IMAGE_SUFFIXES):
        raise ValidationError(f"unsupported type: {image.content_type}")


def _data_uri(image: UploadedImage) -> str:
    mime = image.content_type if (image.content_type or "").startswith("image/") else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(image.content).decode('ascii')}"


def process_image(
    image: UploadedImage,
    extractor: Extractor,
    creator: ReceiptCreator,
    max_bytes: int,
) -> Receipt:
    _check_image(image, max_bytes)
    logger.info("Pipeline - extract text: %s (%d bytes)", image.file_name, len(image.content))
    text = extractor.extract_text(image.content, image.content_type or "image/jpeg")
    logger.info("Pipeline - extract order date: %s", image.file_name)
    order_date = extractor.extract_order_date(text)
    return creator.create(
        ReceiptCreate(
            image_src=_data_uri(image),
            extracted_text=text,
            order_date=order_date,
            file_name=image.file_name,
        )
    )


def process_uploads(
    images: Iterable[UploadedImage],
    extractor: Extractor,
    creator: ReceiptCreator,
    max_bytes: int,
) -> list[ItemResult]:
    """Run every image through the pipeline sequentially."""
    results: list[ItemResult] = []
    for image in images:
        try:
            receipt = process_image(image, extractor, creator, max_bytes)
        except TrackerError as e:
            logger.warning("Upload failed for %s: %s", image.file_name, e.message)
            results.append(ItemResult.failure(image.file_name, e.message))
            continue
        except Exception as e:
            logger.exception("Upload crashed for %s", image.file_name)
            results.append(ItemResult.failure(image.file_name, f"unexpected error: {e}"))
            continue
        results.append(ItemResult.success(image.file_name, to_view(receipt)))
    logger.info(
        "Batch done: %d ok, %d failed",
        sum(1 for r in results if r.ok),
        sum(1 for r in results if not r.ok),
    )
    return results
