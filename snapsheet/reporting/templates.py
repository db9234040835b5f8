"""Flatten table rows into header-keyed dictionaries for the export sinks."""
from typing import Any, Dict, Iterable, List, Sequence

from snapsheet.core.models import TableRow
from snapsheet.reporting.table import TableStore

SOURCE_HEADER = "Source"


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_headers(columns: Sequence[str], include_source: bool = False) -> List[str]:
    headers = list(columns)
    if include_source:
        headers.append(SOURCE_HEADER)
    return headers


def row_to_template_dict(
    row: TableRow, columns: Sequence[str], include_source: bool = False
) -> Dict[str, str]:
    """Convert a TableRow into a dictionary keyed by the export headers."""

    flat = {column: _format_cell(row.data.get(column)) for column in columns}
    if include_source:
        flat[SOURCE_HEADER] = row.source_name
    return flat


def rows_to_template_dicts(
    rows: Iterable[TableRow], columns: Sequence[str], include_source: bool = False
) -> List[Dict[str, str]]:
    return [row_to_template_dict(row, columns, include_source) for row in rows]


def table_to_rows(store: TableStore, include_source: bool = False) -> List[Dict[str, str]]:
    """Flatten every row of ``store`` in table order."""

    return rows_to_template_dicts(store, store.columns, include_source)
