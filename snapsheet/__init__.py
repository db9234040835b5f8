"""Turn photos of receipts, invoices, and cards into rows of one table."""
from snapsheet.core import (
    DEFAULT_COLUMNS,
    ExtractionContext,
    MalformedResponseError,
    MissingCredentialsError,
    ProcessingStatus,
    RateLimitedError,
    TableRow,
    build_context,
    configure_logging,
    load_settings,
)
from snapsheet.extraction import ExtractionClient
from snapsheet.ingestion import encode_image, load_images
from snapsheet.processing import BatchOrchestrator, export_table, run_pipeline
from snapsheet.reporting import TableStore, rows_to_tsv, table_to_rows, write_csv

__all__ = [
    "DEFAULT_COLUMNS",
    "BatchOrchestrator",
    "ExtractionClient",
    "ExtractionContext",
    "MalformedResponseError",
    "MissingCredentialsError",
    "ProcessingStatus",
    "RateLimitedError",
    "TableRow",
    "TableStore",
    "build_context",
    "configure_logging",
    "encode_image",
    "export_table",
    "load_images",
    "load_settings",
    "rows_to_tsv",
    "run_pipeline",
    "table_to_rows",
    "write_csv",
]
