"""Turn raw model text into a flat record."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Sequence

from snapsheet.core.errors import MalformedResponseError
from snapsheet.core.models import CellValue, ExtractedRecord

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data returned from AI"
INVALID_JSON_MESSAGE = "Failed to parse the AI response as valid JSON. Please try again."

_FENCED_BLOCK = re.compile(r"^```[ \t]*(?:[A-Za-z][\w.+-]*)?[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_OPENING_FENCE = re.compile(r"^```[ \t]*(?:[A-Za-z][\w.+-]*)?")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```lang ... ``` block, if any."""

    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped

    match = _FENCED_BLOCK.match(stripped)
    if match:
        return match.group(1).strip()
    # Opening fence without a closing one (truncated answer).
    return _OPENING_FENCE.sub("", stripped, count=1).strip()


def parse_model_text(text: Optional[str]) -> ExtractedRecord:
    """Parse the model answer into a dictionary.

    An array answer yields its first element, or an empty record when the
    array is empty. Anything else that is not a JSON object is rejected.
    """

    if text is None or not text.strip():
        raise MalformedResponseError(NO_DATA_MESSAGE)

    cleaned = strip_code_fence(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.debug("Unparsable model output: %r", cleaned[:200])
        raise MalformedResponseError(INVALID_JSON_MESSAGE) from exc

    if isinstance(data, list):
        if not data:
            return {}
        data = data[0]

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object from the AI but received {type(data).__name__}."
        )
    return data


def _coerce_cell(value: Any) -> CellValue:
    if value is None or isinstance(value, (str, int, float)):
        return value
    return json.dumps(value, ensure_ascii=False)


def conform_record(record: ExtractedRecord, columns: Optional[Sequence[str]] = None) -> ExtractedRecord:
    """Flatten values and, when ``columns`` is given, key the record by exactly those names.

    Keys the model invented are dropped and columns it skipped are filled
    with ``None``.
    """

    if not columns:
        return {str(key): _coerce_cell(value) for key, value in record.items()}

    extra = [key for key in record if key not in columns]
    if extra:
        logger.debug("Dropping keys outside the column set: %s", ", ".join(map(str, extra)))
    return {column: _coerce_cell(record.get(column)) for column in columns}
