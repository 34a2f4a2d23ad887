"""Shared run-spec execution engine for CLI and SDK workflows.

This module maps validated run-spec steps to client operations so different
entry points can execute one declarative batch path without drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

from core.constants import DEFAULT_DOMAIN_NAME
from core.errors import RunSpecError, StorageError
from core.run_spec import RunSpec, RunSpecStep, load_run_spec
from core.run_spec_fields import (
    optional_bool,
    optional_json_value,
    optional_string,
    required_string,
    string_list,
)
from core.types import AllotmentDocument, IngestReport


class RunSpecClient(Protocol):
    """Client API contract required by run-spec execution."""

    def with_data_root(self, data_root: str) -> Any: ...

    def ingest_paths(self, source_paths: Sequence[str], domain: str = ...) -> IngestReport: ...

    def list_tables(self, domain: str = ..., include_hidden: bool = ...) -> tuple[str, ...]: ...

    def drop_table(self, table: str, domain: str = ...) -> None: ...

    def save_allotment(self, name: str, document: AllotmentDocument) -> None: ...

    def save_allotment_file(self, name: str, json_path: str) -> None: ...

    def delete_allotment(self, name: str) -> None: ...


@dataclass(frozen=True)
class RunSpecExecutionContext:
    """In-memory context used to execute run-spec steps."""

    client: RunSpecClient
    default_domain: str
    base_dir: Path


def execute_run_spec_file(client: RunSpecClient, spec_file: str) -> tuple[str, ...]:
    """Load and execute a run-spec file, returning printable output lines."""
    spec = load_run_spec(spec_file)
    return execute_run_spec(client, spec)


def execute_run_spec(client: RunSpecClient, spec: RunSpec) -> tuple[str, ...]:
    """Execute a parsed run-spec object and return output lines.

    Steps run in file order; the first failing step stops the batch.

    Raises:
        RunSpecError: If a step has invalid arguments.
        CsvDeskError: Whatever the failing step raised.
    """
    execution_client = (
        client.with_data_root(str(_resolve_path(spec.base_dir, spec.defaults.data_root)))
        if spec.defaults.data_root
        else client
    )
    context = RunSpecExecutionContext(
        client=execution_client,
        default_domain=spec.defaults.domain or DEFAULT_DOMAIN_NAME,
        base_dir=spec.base_dir,
    )
    output_lines: list[str] = []
    for step in spec.steps:
        output_lines.extend(_execute_step(context, step))
    return tuple(output_lines)


def _execute_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    if step.command == "ingest":
        return _execute_ingest_step(context, step)
    if step.command == "tables":
        return _execute_tables_step(context, step)
    if step.command == "drop-table":
        return (_execute_drop_table_step(context, step),)
    if step.command == "save-allotment":
        return (_execute_save_allotment_step(context, step),)
    if step.command == "delete-allotment":
        return (_execute_delete_allotment_step(context, step),)
    raise RunSpecError(f"Unsupported run-spec command '{step.command}'.")


def _execute_ingest_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    source_paths = tuple(
        str(_resolve_path(context.base_dir, path)) for path in string_list(step.args, "paths")
    )
    domain = _resolve_domain(context, step)
    report = context.client.ingest_paths(source_paths, domain=domain)
    if not report.success:
        raise StorageError(
            f"Ingest step into {domain} stopped after {report.processed_file_count} of "
            f"{report.file_count} files: {report.error}"
        )
    return tuple(
        f"{outcome.table_name}\t{outcome.rows_inserted}\t{outcome.merged_rows_inserted}"
        for outcome in report.outcomes
    ) + (f"{report.file_count} files processed",)


def _execute_tables_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    return context.client.list_tables(
        domain=_resolve_domain(context, step),
        include_hidden=optional_bool(step.args, "include_hidden", default_value=True),
    )


def _execute_drop_table_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    table = required_string(step.args, "table")
    context.client.drop_table(table, domain=_resolve_domain(context, step))
    return f"Table {table} deleted"


def _execute_save_allotment_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    name = required_string(step.args, "name")
    json_file = optional_string(step.args, "file")
    if json_file is not None:
        context.client.save_allotment_file(name, str(_resolve_path(context.base_dir, json_file)))
    else:
        document = AllotmentDocument(
            saved_at=optional_string(step.args, "saved_at"),
            headers=optional_json_value(step.args, "headers"),
            rows=optional_json_value(step.args, "rows"),
        )
        context.client.save_allotment(name, document)
    return f"Allotment table '{name}' saved successfully"


def _execute_delete_allotment_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    name = required_string(step.args, "name")
    context.client.delete_allotment(name)
    return f"Allotment table {name} deleted"


def _resolve_domain(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    return optional_string(step.args, "domain") or context.default_domain


def _resolve_path(base_dir: Path, raw_path: str) -> Path:
    path = Path(raw_path).expanduser()
    return path if path.is_absolute() else base_dir / path
