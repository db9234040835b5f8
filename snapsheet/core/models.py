"""Data models for extracted records and the rows built from them."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

CellValue = Union[str, int, float, None]
ExtractedRecord = Dict[str, CellValue]


def _new_row_id() -> str:
    return uuid.uuid4().hex


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SourceImage:
    """One image waiting to be sent to the model."""

    file_name: str
    base64_data: str
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class TableRow:
    """A single extracted document as it appears in the shared table."""

    data: ExtractedRecord
    source_name: str
    id: str = field(default_factory=_new_row_id)
    created_at: str = field(default_factory=_utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dictionary representation for serialization."""

        return {
            "id": self.id,
            "data": dict(self.data),
            "source_name": self.source_name,
            "created_at": self.created_at,
        }


class ProcessingStatus(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ProcessingState:
    """Current status of the batch run plus the message shown to the user."""

    status: ProcessingStatus = ProcessingStatus.IDLE
    message: Optional[str] = None


@dataclass
class BatchResult:
    """Summary of one batch run."""

    total: int
    rows: List[TableRow] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.rows)
