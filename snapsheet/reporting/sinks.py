"""Export destinations for the extracted table."""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence


def ensure_output_dir(output_path: Path) -> None:
    """Create parent folders for sink outputs when missing."""

    output_path.parent.mkdir(parents=True, exist_ok=True)


def _clean_tsv_cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\t", " ").replace("\r", " ").replace("\n", " ")


def rows_to_tsv(rows: Iterable[Dict[str, Any]], headers: Sequence[str]) -> str:
    """Render rows as tab-separated text ready to paste into Sheets or Excel."""

    lines = ["\t".join(_clean_tsv_cell(header) for header in headers)]
    for row in rows:
        lines.append("\t".join(_clean_tsv_cell(row.get(header)) for header in headers))
    return "\n".join(lines)


def rows_to_csv_text(rows: Iterable[Dict[str, Any]], headers: Sequence[str]) -> str:
    """Render rows as CSV text (used for browser downloads)."""

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(headers), extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def write_csv(rows: Iterable[Dict[str, Any]], output_path: Path, headers: Sequence[str]) -> None:
    """Write rows to a CSV file with the given header order."""

    rows = list(rows)
    ensure_output_dir(output_path)
    with output_path.open("w", newline="", encoding="utf-8") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=list(headers), extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def write_tsv(rows: Iterable[Dict[str, Any]], output_path: Path, headers: Sequence[str]) -> None:
    """Write the clipboard-style TSV text to a file."""

    ensure_output_dir(output_path)
    output_path.write_text(rows_to_tsv(rows, headers) + "\n", encoding="utf-8")


def write_excel(rows: Iterable[Dict[str, Any]], output_path: Path, headers: Sequence[str]) -> None:
    """Write rows to an Excel workbook using openpyxl."""

    rows = list(rows)
    if not rows:
        return

    try:
        from openpyxl import Workbook
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("openpyxl is required for Excel sinks") from exc

    ensure_output_dir(output_path)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "extracted_data"
    sheet.append(list(headers))
    for row in rows:
        sheet.append([row.get(header, "") for header in headers])
    workbook.save(output_path)


def push_to_google_sheets(
    rows: Iterable[Dict[str, Any]],
    headers: Sequence[str],
    spreadsheet_id: str,
    worksheet_title: str = "Sheet1",
    service_account_path: Path | None = None,
) -> None:
    """Upload rows to a Google Sheets worksheet using a service account."""

    rows = list(rows)
    if not rows:
        return

    try:
        import gspread
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("gspread is required for Google Sheets sinks") from exc

    client = (
        gspread.service_account(filename=str(service_account_path))
        if service_account_path
        else gspread.service_account()
    )
    worksheet = client.open_by_key(spreadsheet_id).worksheet(worksheet_title)
    worksheet.clear()
    values: List[List[Any]] = [list(headers)]
    values.extend([row.get(header, "") for header in headers] for row in rows)
    worksheet.append_rows(values)
