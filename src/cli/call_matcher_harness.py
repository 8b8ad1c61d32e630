# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line surface for scanning and annotating call markers."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table
from rich.text import Text

from call_matcher.discovery import (
    DiscoveryError,
    DiscoveryFailure,
    SourceFile,
    discover_sources,
    read_source,
)
from call_matcher.filetypes import filetype_for_path, is_eligible
from call_matcher.model import MatchRecord
from call_matcher.render import annotate_lines, place_annotations, render_record
from call_matcher.scanner import scan_document

logger = logging.getLogger(__name__)

VERBOSE_LOGGERS: tuple[str, ...] = ("call_matcher", "cli")

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "kind": 1,
    "line": 1,
    "end_line": 1,
    "rendering": 6,
}


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="call-matcher")
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan")
    scan_parser.add_argument(
        "--path", required=True, help="Project directory or source file to scan."
    )
    scan_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    scan_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    scan_parser.add_argument(
        "--permissive", action="store_true", help="Also scan C++ sources."
    )

    annotate_parser = subparsers.add_parser("annotate")
    annotate_parser.add_argument(
        "--file", required=True, help="Source file to print with annotations."
    )
    annotate_parser.add_argument(
        "--permissive", action="store_true", help="Also accept C++ sources."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    previous_levels = {name: logging.getLogger(name).level for name in VERBOSE_LOGGERS}
    if args.verbose:
        for name in VERBOSE_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)
    try:
        if args.command == "scan":
            return _run_scan(args=args, stdout=stdout, stderr=stderr)
        if args.command == "annotate":
            return _run_annotate(args=args, stdout=stdout, stderr=stderr)
    finally:
        for name, level in previous_levels.items():
            logging.getLogger(name).setLevel(level)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_scan(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run scan command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    root_path = Path(args.path)
    try:
        sources, errors = discover_sources(root_path, permissive=args.permissive)
    except DiscoveryFailure as exc:
        logger.warning(f"Discovery failed (path={root_path} error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    results = [(source, scan_document(source.lines)) for source in sources]
    logger.info(
        f"Scan completed (path={root_path} files={len(sources)} "
        f"records={sum(len(records) for _, records in results)} errors={len(errors)})"
    )
    _write_errors(errors=errors, stderr=stderr)
    if args.format == "json":
        payload = _build_payload(results=results, errors=errors)
        if args.output:
            try:
                _write_json_file(payload=payload, output_path=Path(args.output))
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(payload=payload, stdout=stdout)
    else:
        _write_table(results=results, stdout=stdout)
    return 0


def _run_annotate(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run annotate command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    file_path = Path(args.file)
    if not file_path.is_file():
        logger.warning(f"File does not exist (file_path={file_path})")
        stderr.write(f"File does not exist: {file_path}\n")
        return 2
    filetype = filetype_for_path(file_path)
    if not is_eligible(filetype, permissive=args.permissive):
        logger.warning(f"Not a C/C++ file (file_path={file_path} filetype={filetype})")
        stderr.write("Not a C/C++ file\n")
        return 2

    errors: list[DiscoveryError] = []
    source = read_source(file_path, file_path.name, str(filetype), errors)
    _write_errors(errors=errors, stderr=stderr)
    if source is None:
        return 2
    lines = source.lines
    annotations = place_annotations(lines, scan_document(lines))
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    for text in annotate_lines(lines, annotations):
        console.print(text, highlight=False, soft_wrap=True)
    return 0


def _record_payload(source: SourceFile, record: MatchRecord) -> dict[str, Any]:
    payload = asdict(record)
    payload["file_path"] = source.path
    payload["rendering"] = render_record(record)
    return payload


def _build_payload(
    results: list[tuple[SourceFile, list[MatchRecord]]],
    errors: list[DiscoveryError],
) -> dict[str, Any]:
    return {
        "records": [
            _record_payload(source, record)
            for source, records in results
            for record in records
        ],
        "errors": [asdict(error) for error in errors],
    }


def _write_errors(errors: list[DiscoveryError], stderr: TextIO) -> None:
    """Write discovery errors to stderr.

    Args:
        errors: Recoverable discovery errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"discovery_error: {error}\n")


def _write_json(payload: dict[str, Any], stdout: TextIO) -> None:
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(payload: dict[str, Any], output_path: Path) -> None:
    """Write raw JSON payload to an output file.

    Args:
        payload: Records and errors.
        output_path: Target file path.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
    )


def _write_table(
    results: list[tuple[SourceFile, list[MatchRecord]]], stdout: TextIO
) -> None:
    """Write one table of records per scanned file.

    Args:
        results: Scanned files with their records.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    for source, records in results:
        if not records:
            continue
        console.rule(Text(source.path), style=Style(color="cyan"), characters="-")
        table = Table(show_header=True, show_lines=True, expand=True)
        table.add_column("kind", ratio=TABLE_COLUMN_RATIOS["kind"], overflow="fold")
        table.add_column(
            "line", ratio=TABLE_COLUMN_RATIOS["line"], justify="right", overflow="fold"
        )
        table.add_column(
            "end_line",
            ratio=TABLE_COLUMN_RATIOS["end_line"],
            justify="right",
            overflow="fold",
        )
        table.add_column(
            "rendering", ratio=TABLE_COLUMN_RATIOS["rendering"], overflow="fold"
        )
        for record in records:
            table.add_row(
                str(record.kind),
                str(record.line),
                str(record.end_line),
                Text(render_record(record)),
            )
        console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
