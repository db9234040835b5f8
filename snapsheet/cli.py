"""Command line entry point: extract a folder of photos into one table file."""
import argparse
from pathlib import Path

from snapsheet.core.logging import configure_logging
from snapsheet.processing.pipeline import SINKS, run_pipeline


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI entry point."""

    parser = argparse.ArgumentParser(description="Extract document photos into a table")
    parser.add_argument(
        "--image-dir",
        type=Path,
        default=Path("images"),
        help="Folder containing receipt, invoice, or card photos",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("output/extracted_data.csv"),
        help="File to write the table to (ignored for --sink=sheets)",
    )
    parser.add_argument(
        "--sink",
        choices=SINKS,
        default="csv",
        help="Output format or destination for the extracted rows",
    )
    parser.add_argument(
        "--include-source",
        action="store_true",
        help="Append a Source column with the image file name",
    )
    parser.add_argument(
        "--spreadsheet-id",
        help="Google Sheets spreadsheet ID for the sheets sink",
    )
    parser.add_argument(
        "--worksheet",
        help="Worksheet title inside the Google Sheets document",
    )
    parser.add_argument(
        "--service-account",
        type=Path,
        help="Path to a Google service account JSON key used for Sheets pushes",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline and return a process exit code."""

    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    result = run_pipeline(
        args.image_dir,
        args.output,
        sink=args.sink,
        include_source=args.include_source,
        spreadsheet_id=args.spreadsheet_id,
        worksheet_title=args.worksheet,
        service_account_path=args.service_account,
    )
    print(f"Extracted {result.succeeded} of {result.total} image(s)")
    if result.failed:
        print("Failed: " + ", ".join(result.failed))
    if result.rows and args.sink != "sheets":
        print(f"Wrote {args.output}")
    return 0 if result.rows else 1


if __name__ == "__main__":
    raise SystemExit(main())
