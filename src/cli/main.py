"""csvdesk CLI entry points.
This module exposes commands for CSV ingestion, table browsing and allotments.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.allotment_commands import (
    add_allotment_commands,
    run_allotments_command,
    run_delete_allotment_command,
    run_save_allotment_command,
    run_show_allotment_command,
)
from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from cli.table_commands import (
    add_domain_argument,
    add_table_commands,
    run_columns_command,
    run_delete_row_command,
    run_drop_table_command,
    run_rows_command,
    run_update_row_command,
)
from core.config import CsvDeskConfig
from core.errors import CsvDeskError, InvalidPayloadError
from core.logging_config import set_log_level
from store.client_sdk import CsvDeskClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="csvdesk", description="csvdesk CSV ingestion CLI")
    parser.add_argument("--data-root", help="Override CSVDESK_DATA_ROOT for this command")
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Minimum level of structured log lines written to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_tables_command(subparsers)
    add_table_commands(subparsers)
    add_allotment_commands(subparsers)
    _add_invoke_command(subparsers)
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the csvdesk CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 on success, 1 when the command reported a failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        set_log_level(logging.getLevelName(args.log_level))
    try:
        client = _build_client(args.data_root)
        return _run_command(client, args, parser)
    except CsvDeskError as error:
        print(f"error={error}")
        return 1


def _run_command(
    client: CsvDeskClient,
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> int:
    if args.command == "ingest":
        return _run_ingest_command(client, args)
    if args.command == "tables":
        return _run_tables_command(client, args)
    if args.command == "rows":
        return run_rows_command(client, args)
    if args.command == "columns":
        return run_columns_command(client, args)
    if args.command == "update-row":
        return run_update_row_command(client, args)
    if args.command == "delete-row":
        return run_delete_row_command(client, args)
    if args.command == "drop-table":
        return run_drop_table_command(client, args)
    if args.command == "save-allotment":
        return run_save_allotment_command(client, args)
    if args.command == "allotments":
        return run_allotments_command(client, args)
    if args.command == "show-allotment":
        return run_show_allotment_command(client, args)
    if args.command == "delete-allotment":
        return run_delete_allotment_command(client, args)
    if args.command == "invoke":
        return _run_invoke_command(client, args)
    if args.command == "run-spec":
        return run_run_spec_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> CsvDeskClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = CsvDeskConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return CsvDeskClient(config)


def _run_ingest_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Prints one ``table<TAB>rows_inserted<TAB>merged_rows_inserted`` line per
    processed file, then a summary line.
    """
    report = client.ingest_paths(args.sources, domain=args.domain)
    for outcome in report.outcomes:
        print(f"{outcome.table_name}\t{outcome.rows_inserted}\t{outcome.merged_rows_inserted}")
    if not report.success:
        print(
            f"error={report.error} "
            f"(processed {report.processed_file_count} of {report.file_count} files)"
        )
        return 1
    print(f"{report.file_count} files processed")
    return 0


def _run_tables_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    for table in client.list_tables(domain=args.domain, include_hidden=not args.hide_internal):
        print(table)
    return 0


def _run_invoke_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    """Handle invoke command; exit code mirrors the result's success flag."""
    result = client.invoke(args.operation, _parse_payload(args.payload))
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


def _parse_payload(raw_payload: str | None) -> Any:
    if raw_payload is None:
        return None
    try:
        return json.loads(raw_payload)
    except json.JSONDecodeError as error:
        raise InvalidPayloadError(
            f"Failed to parse --payload as JSON: {error}. Pass a JSON object."
        ) from error


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest CSV files into per-file tables")
    parser.add_argument("sources", nargs="+", help="CSV files or directories of CSV files")
    add_domain_argument(parser)


def _add_tables_command(subparsers: Any) -> None:
    """Register tables subcommand."""
    parser = subparsers.add_parser("tables", help="List tables of a domain store")
    add_domain_argument(parser)
    parser.add_argument(
        "--hide-internal",
        action="store_true",
        help="Omit the merged table and other internal tables",
    )


def _add_invoke_command(subparsers: Any) -> None:
    """Register invoke subcommand."""
    parser = subparsers.add_parser("invoke", help="Run one named operation with a JSON payload")
    parser.add_argument("operation", help="Operation name, e.g. get_tables")
    parser.add_argument("--payload", help="JSON object with operation arguments")
