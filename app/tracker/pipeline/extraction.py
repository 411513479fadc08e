"""
Extraction client - receipt image → text → order date via an
OpenAI-compatible vision model (Gemini by default).
"""
from __future__ import annotations

import base64
import json
import logging
from datetime import date
from typing import Optional

from openai import OpenAI, OpenAIError

from app.config import Settings
from app.errors import UpstreamError
from app.tracker.pipeline.aging import normalize_order_date
from app.tracker.schemas import NO_DATE

logger = logging.getLogger(__name__)

TEXT_PROMPT = (
    "Extract all visible text from this image. Provide the text exactly as it "
    "appears, maintaining line breaks."
)

DATE_PROMPT = (
    "Analyze the following receipt text and find the order date. The current "
    "year is {year}. If you see a date like 'DD/MM' or 'DD-MM', assume the year "
    "is {year}. Return a JSON object with a single key \"orderDate\" in "
    "\"YYYY-MM-DD\" format. If no date is found, the value should be \"N/A\".\n\n"
    "Text: \"{text}\""
)


def _strip_fence(content: str) -> str:
    stripped = content.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.split("\n")[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_date_response(content: str | None) -> str:
    """Pull ``orderDate`` out of a model reply; anything unusable is ``N/A``."""
    if not content:
        return NO_DATE
    try:
        data = json.loads(_strip_fence(content))
    except json.JSONDecodeError:
        logger.warning("Date response is not JSON: %.80s", content)
        return NO_DATE
    if not isinstance(data, dict):
        return NO_DATE
    return normalize_order_date(data.get("orderDate"))


class ExtractionClient:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float = 60.0,
        year_hint: Optional[int] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.year_hint = year_hint
        self._client = client
        if self._client is None and api_key:
            self._client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtractionClient":
        return cls(
            api_key=settings.EXTRACTION_API_KEY,
            base_url=settings.EXTRACTION_BASE_URL,
            model=settings.EXTRACTION_MODEL,
            timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
            year_hint=settings.EXTRACTION_YEAR_HINT,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require_client(self) -> OpenAI:
        if self._client is None:
            raise UpstreamError("extraction service not configured")
        return self._client

    def extract_text(self, content: bytes, mime_type: str) -> str:
        client = self._require_client()
        encoded = base64.b64encode(content).decode("ascii")
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                        {"type": "text", "text": TEXT_PROMPT},
                    ],
                }],
                temperature=0,
            )
        except OpenAIError as e:
            logger.error("Text extraction call failed: %s", e)
            raise UpstreamError(f"text extraction failed: {e}") from e

        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            raise UpstreamError("no text could be extracted from the image")
        return text

    def extract_order_date(self, text: str) -> str:
        """Best-effort order date; returns ``N/A`` instead of raising."""
        if not text or self._client is None:
            return NO_DATE
        year = self.year_hint or date.today().year
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": DATE_PROMPT.format(year=year, text=text)}],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except OpenAIError as e:
            logger.error("Date extraction call failed: %s", e)
            return NO_DATE
        if not response.choices:
            return NO_DATE
        return parse_date_response(response.choices[0].message.content)
