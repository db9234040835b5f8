"""Folder-to-file pipeline used by the command line entry point."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from snapsheet.core.config import ExtractionContext, build_context, load_settings
from snapsheet.core.models import BatchResult
from snapsheet.core.utils import load_env_file
from snapsheet.ingestion.loader import load_images
from snapsheet.processing.orchestrator import BatchOrchestrator
from snapsheet.reporting.sinks import push_to_google_sheets, write_csv, write_excel, write_tsv
from snapsheet.reporting.table import TableStore
from snapsheet.reporting.templates import export_headers, table_to_rows

DEFAULT_SERVICE_ACCOUNT_PATHS = [
    Path("secrets/service_account.json"),
    Path("credentials/service_account.json"),
]
DEFAULT_SHEETS_ENV_FILE = Path("secrets/sheets.env")
SINKS = ("csv", "tsv", "excel", "sheets")
_SHEETS_ENV_LOADED = False

logger = logging.getLogger(__name__)


def _ensure_sheets_env() -> None:
    """Populate Google Sheets env vars from secrets/sheets.env."""

    global _SHEETS_ENV_LOADED
    if _SHEETS_ENV_LOADED:
        return
    _SHEETS_ENV_LOADED = True

    env_path = Path(os.getenv("GOOGLE_SHEETS_ENV_FILE", DEFAULT_SHEETS_ENV_FILE))
    load_env_file(env_path)


def _default_service_account_path() -> Optional[Path]:
    for candidate in DEFAULT_SERVICE_ACCOUNT_PATHS:
        if candidate.exists():
            return candidate
    return None


def resolve_sheets_target(
    spreadsheet_id: Optional[str],
    worksheet_title: Optional[str],
    explicit_account_path: Optional[Path],
) -> Dict[str, Any]:
    """Fill Sheets settings from arguments, then ``GOOGLE_SHEETS_*`` variables."""

    _ensure_sheets_env()
    spreadsheet_id = spreadsheet_id or os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID")
    if not spreadsheet_id:
        raise ValueError("spreadsheet_id is required when sink='sheets'")

    account_env = os.getenv("GOOGLE_SHEETS_SERVICE_ACCOUNT")
    account_path = explicit_account_path or (Path(account_env) if account_env else None)
    account_path = account_path or _default_service_account_path()
    if not account_path:
        raise ValueError(
            "Provide --service-account pointing to your Google credentials or place a file at "
            f"{DEFAULT_SERVICE_ACCOUNT_PATHS[0]}"
        )

    return {
        "spreadsheet_id": spreadsheet_id,
        "worksheet_title": worksheet_title or os.getenv("GOOGLE_SHEETS_WORKSHEET", "Sheet1"),
        "service_account_path": account_path,
    }


def export_table(
    store: TableStore,
    output_path: Path,
    sink: str = "csv",
    include_source: bool = False,
    spreadsheet_id: Optional[str] = None,
    worksheet_title: Optional[str] = None,
    service_account_path: Optional[Path] = None,
) -> None:
    """Write ``store`` to the requested sink."""

    if sink not in SINKS:
        raise ValueError(f"Unknown sink {sink!r}; choose one of {', '.join(SINKS)}")

    headers = export_headers(store.columns, include_source)
    rows = table_to_rows(store, include_source)

    if sink == "csv":
        write_csv(rows, output_path, headers)
        logger.info("Wrote CSV output to %s", output_path)
    elif sink == "tsv":
        write_tsv(rows, output_path, headers)
        logger.info("Wrote TSV output to %s", output_path)
    elif sink == "excel":
        write_excel(rows, output_path, headers)
        logger.info("Wrote Excel output to %s", output_path)
    else:
        target = resolve_sheets_target(spreadsheet_id, worksheet_title, service_account_path)
        push_to_google_sheets(rows, headers, **target)
        logger.info(
            "Pushed %d rows to Google Sheets document %s (worksheet %s)",
            len(rows),
            target["spreadsheet_id"],
            target["worksheet_title"],
        )


def run_pipeline(
    image_dir: Path,
    output_path: Path,
    sink: str = "csv",
    include_source: bool = False,
    context: Optional[ExtractionContext] = None,
    spreadsheet_id: Optional[str] = None,
    worksheet_title: Optional[str] = None,
    service_account_path: Optional[Path] = None,
) -> BatchResult:
    """Extract every image under ``image_dir`` and export the resulting table."""

    logger.info("Pipeline starting for image dir %s", image_dir)
    images, alerts = load_images(image_dir)
    for alert in alerts:
        logger.warning("Alert: %s", alert)

    if not images:
        message = (
            f"No images found under {image_dir}. "
            "Verify the directory exists and includes photos of receipts, invoices, or cards."
        )
        logger.error(message)
        raise ValueError(message)

    context = context or build_context(load_settings())
    orchestrator = BatchOrchestrator(context)
    orchestrator.tracker.subscribe(lambda state: logger.info("%s", state.message or state.status.value))
    result = orchestrator.run_batch(images)

    if result.rows:
        export_table(
            orchestrator.store,
            output_path,
            sink=sink,
            include_source=include_source,
            spreadsheet_id=spreadsheet_id,
            worksheet_title=worksheet_title,
            service_account_path=service_account_path,
        )
    else:
        logger.warning("Nothing to export; every image failed")
    return result
