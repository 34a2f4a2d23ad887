"""Allotment CLI command wiring.

This module registers subcommands for saving, listing, showing and deleting
allotment documents.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from store.client_sdk import CsvDeskClient


def add_allotment_commands(subparsers: Any) -> None:
    """Register allotment subcommands."""
    save_parser = subparsers.add_parser(
        "save-allotment",
        help="Save an allotment document from a JSON file",
    )
    save_parser.add_argument("name", help="Allotment table name")
    save_parser.add_argument(
        "--json",
        dest="json_file",
        required=True,
        help='JSON file with {"saved_at", "headers", "rows"}',
    )

    subparsers.add_parser("allotments", help="List saved allotment names")

    show_parser = subparsers.add_parser("show-allotment", help="Print one allotment document")
    show_parser.add_argument("name", help="Allotment table name")

    delete_parser = subparsers.add_parser("delete-allotment", help="Delete one allotment")
    delete_parser.add_argument("name", help="Allotment table name")


def run_save_allotment_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    client.save_allotment_file(args.name, args.json_file)
    print(f"Allotment table '{args.name}' saved successfully")
    return 0


def run_allotments_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    for name in client.list_allotments():
        print(name)
    return 0


def run_show_allotment_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    """Print the stored document, or report that nothing is saved."""
    stored = client.load_allotment(args.name)
    if stored is None:
        print(f"error=No allotment saved under '{args.name}'.")
        return 1
    payload = {
        "id": stored.row_id,
        "saved_at": stored.document.saved_at,
        "headers": stored.document.headers,
        "rows": stored.document.rows,
        "created_at": stored.created_at,
    }
    print(json.dumps(payload, indent=2, default=str))
    return 0


def run_delete_allotment_command(client: CsvDeskClient, args: argparse.Namespace) -> int:
    client.delete_allotment(args.name)
    print(f"Allotment table {args.name} deleted")
    return 0
