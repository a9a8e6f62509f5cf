"""
CLI utility helpers — output formatting and result rendering.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from filespine.core.errors import FileSpineError
from filespine.core.result import Err, Ok, Result

console = Console()
err_console = Console(stderr=True)

_PREVIEW_CHARS = 48


# ── Result rendering ─────────────────────────────────────────────────────


def preview(value: Any) -> str:
    """Short, single-line description of a read value."""
    if isinstance(value, bytes):
        return f"{len(value)} bytes"
    if isinstance(value, str):
        first = value.splitlines()[0] if value else ""
        if len(first) > _PREVIEW_CHARS:
            first = first[: _PREVIEW_CHARS - 3] + "..."
        return f"{len(value)} chars: {first}" if first else f"{len(value)} chars"
    if isinstance(value, dict):
        return f"dict with {len(value)} keys"
    if isinstance(value, list):
        return f"list of {len(value)}"
    return type(value).__name__


def result_row(path: str | Path, result: Result[Any]) -> dict[str, str]:
    match result:
        case Ok(value):
            return {"file": str(path), "status": "ok", "type": type(value).__name__, "detail": preview(value)}
        case Err(error):
            return {"file": str(path), "status": "error", "type": type(error).__name__, "detail": str(error)}


def result_payload(result: Result[Any]) -> dict[str, Any]:
    """JSON-safe rendering of a result; bytes are reported by size only."""
    match result:
        case Ok(bytes() as value):
            return {"ok": True, "value": None, "size": len(value)}
        case _:
            return result.to_dict()


def output_results(
    results: dict[str | Path, Result[Any]],
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render a batch result map as a table or JSON."""
    if as_json:
        payload = {str(path): result_payload(result) for path, result in results.items()}
        console.print_json(json.dumps(payload, default=str))
        return

    if not results:
        console.print("[dim]No files.[/dim]")
        return
    print_table([result_row(path, result) for path, result in results.items()], title=title)


def fail(error: BaseException) -> None:
    """Print ``error`` to stderr and exit with status 1."""
    if isinstance(error, FileSpineError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
        if error.cause is not None:
            err_console.print(f"  [dim]caused by {type(error.cause).__name__}: {escape(str(error.cause))}[/dim]")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(error))}")
    raise typer.Exit(code=1)


# ── Tables ───────────────────────────────────────────────────────────────


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(escape(str(v)) for v in row.values()))
    console.print(table)
