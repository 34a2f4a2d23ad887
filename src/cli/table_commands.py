"""Table browsing CLI command wiring.

This module registers row, column and table maintenance subcommands and
delegates them to the SDK client.
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Sequence

from core.constants import DEFAULT_DOMAIN_NAME
from core.errors import InvalidPayloadError
from core.types import DOMAINS
from store.client_sdk import CsvDeskClient


def add_domain_argument(parser: argparse.ArgumentParser) -> None:
    """Attach the shared ``--domain`` option."""
    parser.add_argument(
        "--domain",
        default=DEFAULT_DOMAIN_NAME,
        choices=tuple(DOMAINS),
        help="Domain store to use",
    )


def add_table_commands(subparsers: Any) -> None:
    """Register rows, columns, update-row, delete-row and drop-table subcommands."""
    rows_parser = subparsers.add_parser("rows", help="Print every row of a table as JSON lines")
    rows_parser.add_argument("table", help="Table name")
    add_domain_argument(rows_parser)

    columns_parser = subparsers.add_parser("columns", help="Print column metadata of a table")
    columns_parser.add_argument("table", help="Table name")
    add_domain_argument(columns_parser)

    update_parser = subparsers.add_parser("update-row", help="Update one row by primary key")
    update_parser.add_argument("table", help="Table name")
    update_parser.add_argument("--pk-column", required=True, help="Primary key column")
    update_parser.add_argument("--row-id", required=True, help="Primary key value")
    update_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        required=True,
        metavar="COLUMN=VALUE",
        help="Column assignment; repeat for several columns",
    )
    add_domain_argument(update_parser)

    delete_parser = subparsers.add_parser("delete-row", help="Delete one row by primary key")
    delete_parser.add_argument("table", help="Table name")
    delete_parser.add_argument("--row-id", required=True, help="Primary key value")
    delete_parser.add_argument("--pk-column", help="Primary key column; detected when omitted")
    add_domain_argument(delete_parser)

    drop_parser = subparsers.add_parser("drop-table", help="Drop a table if it exists")
    drop_parser.add_argument("table", help="Table name")
    add_domain_argument(drop_parser)


def run_rows_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    for row in client.fetch_rows(args.table, domain=args.domain):
        print(json.dumps(row, sort_keys=True, default=str))
    return 0


def run_columns_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    info = client.describe_table(args.table, domain=args.domain)
    for column in info.columns:
        print(f"{column.name}\t{column.type or '-'}\t{int(column.notnull)}\t{int(column.pk)}")
    print(f"primary_key={info.primary_key}")
    return 0


def run_update_row_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    change = client.update_row(
        table=args.table,
        pk_column=args.pk_column,
        row_id=args.row_id,
        updated_data=parse_assignments(args.assignments),
        domain=args.domain,
    )
    print(change.message)
    return 0


def run_delete_row_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    change = client.delete_row(
        table=args.table,
        row_id=args.row_id,
        pk_column=args.pk_column,
        domain=args.domain,
    )
    print(change.message)
    return 0


def run_drop_table_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    client.drop_table(args.table, domain=args.domain)
    print(f"Table {args.table} deleted")
    return 0


def parse_assignments(assignments: Sequence[str]) -> dict[str, str]:
    """Parse ``COLUMN=VALUE`` strings; later assignments win.

    Raises:
        InvalidPayloadError: If an assignment has no ``=`` or no column.
    """
    updated_data: dict[str, str] = {}
    for assignment in assignments:
        column, separator, value = assignment.partition("=")
        if not separator or not column.strip():
            raise InvalidPayloadError(
                f"Invalid assignment '{assignment}'. Use --set COLUMN=VALUE."
            )
        updated_data[column.strip()] = value
    return updated_data
