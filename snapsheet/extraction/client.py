"""Gemini-backed extraction of one image into one flat record."""
from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

from google.genai import types

from snapsheet.core.errors import RateLimitedError
from snapsheet.core.models import ExtractedRecord, SourceImage
from snapsheet.extraction.parsing import conform_record, parse_model_text

if TYPE_CHECKING:
    from snapsheet.core.config import ExtractionContext

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = (429, "429", "RESOURCE_EXHAUSTED")


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True when ``exc`` looks like an HTTP 429 / resource exhausted failure."""

    for attribute in ("status", "code", "status_code"):
        if getattr(exc, attribute, None) in RATE_LIMIT_MARKERS:
            return True
    response = getattr(exc, "response", None)
    if getattr(response, "status_code", None) == 429:
        return True
    return "429" in str(exc)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry ``attempt`` (1-based): 4, 8, 16, 32, 64..."""

    return float(2 ** (attempt + 1))


class ExtractionClient:
    """Send an image and the prompt to the model and return a normalized record."""

    def __init__(self, context: "ExtractionContext") -> None:
        self.context = context

    def build_prompt(self, columns: Optional[Sequence[str]] = None) -> str:
        return self.context.prompt.render(columns)

    def extract(
        self,
        base64_image: str,
        columns: Optional[Sequence[str]] = None,
        mime_type: str = "image/jpeg",
    ) -> ExtractedRecord:
        """Extract a record from ``base64_image``.

        Rate-limit failures are retried with exponential backoff up to
        ``context.max_retries`` times, after which ``RateLimitedError`` is
        raised. Unparsable answers raise ``MalformedResponseError``. Any other
        error from the model call propagates unchanged.
        """

        prompt = self.build_prompt(columns)
        max_retries = self.context.max_retries
        attempt = 0

        while True:
            try:
                response = self._generate(base64_image, mime_type, prompt)
            except Exception as exc:
                if not is_rate_limit_error(exc):
                    raise
                if attempt >= max_retries:
                    raise RateLimitedError(
                        f"Rate limit persisted after {max_retries} retries",
                        attempts=attempt + 1,
                    ) from exc
                attempt += 1
                delay = backoff_delay(attempt)
                logger.warning(
                    "Rate limit hit. Retrying in %.0fs... (Attempt %d/%d)",
                    delay,
                    attempt,
                    max_retries,
                )
                self.context.sleep(delay)
                continue

            record = parse_model_text(getattr(response, "text", None))
            return conform_record(record, columns)

    def extract_image(self, image: SourceImage, columns: Optional[Sequence[str]] = None) -> ExtractedRecord:
        return self.extract(image.base64_data, columns=columns, mime_type=image.mime_type)

    def _generate(self, base64_image: str, mime_type: str, prompt: str) -> Any:
        image_part = types.Part.from_bytes(
            data=base64.b64decode(base64_image),
            mime_type=mime_type,
        )
        return self.context.client.models.generate_content(
            model=self.context.model,
            contents=[image_part, prompt],
        )
