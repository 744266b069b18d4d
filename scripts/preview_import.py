#!/usr/bin/env python3
"""Preview how an equipment spreadsheet would import.

Parses the file, suggests a column mapping from its headers, validates
every row against that mapping and prints a summary.

Usage:
    python scripts/preview_import.py price_list.xlsx
    python scripts/preview_import.py price_list.csv --json
    python scripts/preview_import.py price_list.csv --rows 20
"""
import argparse
import json
import sys
from typing import List, Optional

import structlog

from equipment_import import (
    PREVIEW_ROWS,
    ImportPipelineError,
    calculate_import_summary,
    detect_headers,
    mappings_from_suggestions,
    parse_file,
    validate_rows,
)
from equipment_import.config import configure_logging
from equipment_import.services import unmapped_required_fields

logger = structlog.get_logger(__name__)


def build_preview(path: str, preview_rows: int = PREVIEW_ROWS) -> dict:
    """Run the pipeline on one file and collect the preview document.

    Raises:
        ImportPipelineError: If the file cannot be decoded
    """
    parsed = parse_file(path)
    suggestions = detect_headers(parsed)
    mappings = mappings_from_suggestions(suggestions)
    results = validate_rows(parsed.rows, mappings)
    summary = calculate_import_summary(results)

    return {
        "file": parsed.model_dump(by_alias=True, mode="json", exclude={"rows"}),
        "preview": [r.model_dump(by_alias=True, mode="json") for r in parsed.preview(preview_rows)],
        "suggestions": [s.model_dump(by_alias=True, mode="json") for s in suggestions],
        "unmappedRequired": [f.value for f in unmapped_required_fields(mappings)],
        "results": [r.model_dump(by_alias=True, mode="json") for r in results],
        "summary": summary.model_dump(by_alias=True, mode="json"),
    }


def print_report(document: dict) -> None:
    file_info = document["file"]
    summary = document["summary"]

    print("=" * 70)
    print(f"File: {file_info['fileName']} ({file_info['fileType']})")
    print(f"Rows: {len(document['results'])} of {file_info['totalRows']}"
          + (" (truncated)" if file_info["truncated"] else ""))
    print("=" * 70)

    print("\nColumn mapping:")
    for suggestion in document["suggestions"]:
        target = suggestion["suggestedField"] or "-"
        print(f"  [{suggestion['columnIndex']}] {suggestion['header']!r:30} -> "
              f"{target} ({suggestion['confidence']:.2f})")
    if document["unmappedRequired"]:
        print(f"  Unmapped required fields: {', '.join(document['unmappedRequired'])}")

    print("\nSummary:")
    print(f"  To create:  {summary['toCreate']}")
    print(f"  To update:  {summary['toUpdate']}")
    print(f"  Incomplete: {summary['incomplete']}")
    print(f"  Invalid:    {summary['invalid']}")

    problems = [r for r in document["results"] if r["status"] != "valid"]
    if problems:
        print("\nRows needing attention:")
        for result in problems[:PREVIEW_ROWS]:
            details = result["errors"] or [f"missing {', '.join(result['missingFields'])}"]
            print(f"  Row {result['rowNumber']}: {result['status']} - {'; '.join(details)}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for script."""
    parser = argparse.ArgumentParser(
        description="Preview an equipment catalog import",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", help="CSV, TSV, XLSX or XLS file to preview")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the preview as a JSON document",
    )
    parser.add_argument(
        "--rows",
        type=int,
        default=PREVIEW_ROWS,
        help=f"Number of preview rows to include (default: {PREVIEW_ROWS})",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        document = build_preview(args.file, preview_rows=args.rows)
    except ImportPipelineError as e:
        logger.error("import_preview_failed", file=args.file, error_type=e.kind.value)
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(document, indent=2))
    else:
        print_report(document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
