"""Table storage and export sinks."""
from snapsheet.reporting.sinks import (
    ensure_output_dir,
    push_to_google_sheets,
    rows_to_csv_text,
    rows_to_tsv,
    write_csv,
    write_excel,
    write_tsv,
)
from snapsheet.reporting.table import TableStore
from snapsheet.reporting.templates import (
    SOURCE_HEADER,
    export_headers,
    row_to_template_dict,
    rows_to_template_dicts,
    table_to_rows,
)

__all__ = [
    "SOURCE_HEADER",
    "TableStore",
    "ensure_output_dir",
    "export_headers",
    "push_to_google_sheets",
    "row_to_template_dict",
    "rows_to_csv_text",
    "rows_to_template_dicts",
    "rows_to_tsv",
    "table_to_rows",
    "write_csv",
    "write_excel",
    "write_tsv",
]
