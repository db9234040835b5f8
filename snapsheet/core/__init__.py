"""Core building blocks for the snapsheet package."""
from snapsheet.core.config import (
    DEFAULT_COLUMNS,
    ExtractionContext,
    Settings,
    build_context,
    load_settings,
)
from snapsheet.core.errors import (
    ConfigurationError,
    ExtractionError,
    MalformedResponseError,
    MissingCredentialsError,
    RateLimitedError,
    SnapsheetError,
)
from snapsheet.core.logging import configure_logging
from snapsheet.core.models import (
    BatchResult,
    ExtractedRecord,
    ProcessingState,
    ProcessingStatus,
    SourceImage,
    TableRow,
)

__all__ = [
    "DEFAULT_COLUMNS",
    "BatchResult",
    "ConfigurationError",
    "ExtractedRecord",
    "ExtractionContext",
    "ExtractionError",
    "MalformedResponseError",
    "MissingCredentialsError",
    "ProcessingState",
    "ProcessingStatus",
    "RateLimitedError",
    "Settings",
    "SnapsheetError",
    "SourceImage",
    "TableRow",
    "build_context",
    "configure_logging",
    "load_settings",
]
