"""
Root Typer application for the file-spine CLI.

Every command builds a ``FileManager`` with the default handler set on a
worker pool sized from ``FileSpineSettings`` (``FILESPINE_*`` env vars).
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape
from typer import Typer

from filespine.cli.utils import console, fail, output_results, print_table
from filespine.core.errors import BatchAggregateError, FileSpineError
from filespine.core.logging import configure_logging
from filespine.core.settings import FileSpineSettings
from filespine.execution.pools import worker_pool
from filespine.handlers.base import WriteMode
from filespine.manager import FileManager

app = Typer(
    name="filespine",
    help="file-spine — read and write files of any registered format.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


class ReadAs(str, Enum):
    AUTO = "auto"
    TEXT = "text"
    BYTES = "bytes"


_TARGET_TYPES = {ReadAs.AUTO: None, ReadAs.TEXT: str, ReadAs.BYTES: bytes}


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from filespine import __version__

        typer.echo(f"file-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log file operations to stderr."),
) -> None:
    """file-spine CLI — concurrent, format-aware file reads and writes."""
    settings = FileSpineSettings()
    configure_logging(
        level=settings.log_level if verbose else "ERROR",
        json_format=settings.json_logs,
        stream=sys.stderr,
    )


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("read")
def read(
    paths: list[Path] = typer.Argument(..., help="Files to read concurrently."),
    read_as: ReadAs = typer.Option(ReadAs.AUTO, "--as", help="Target type for every file."),
    strict: bool = typer.Option(False, "--strict", help="Fail the whole batch on any failure."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Read files in one batch and report each outcome."""
    settings = FileSpineSettings()
    target_type = _TARGET_TYPES[read_as]
    with worker_pool(settings) as pool:
        files = FileManager.from_settings(pool, settings)
        try:
            results = files.read_many_blocking(
                {path: target_type for path in paths},
                tolerate_partial_failures=not strict,
            )
        except BatchAggregateError as e:
            for path, error in e.failures.items():
                console.print(f"[red]✗[/red] {escape(str(path))}: {escape(str(error))}")
            fail(e)

    output_results(results, as_json=json_out, title="Read")
    if any(result.is_err() for result in results.values()):
        raise typer.Exit(code=1)


@app.command("write")
def write(
    path: Path = typer.Argument(..., help="Text file to write."),
    content: str = typer.Argument(..., help="Text to write."),
    mode: WriteMode | None = typer.Option(None, "--mode", "-m", help="Defaults to FILESPINE_DEFAULT_WRITE_MODE."),
) -> None:
    """Write text to a file."""
    settings = FileSpineSettings()
    with worker_pool(settings) as pool:
        files = FileManager.from_settings(pool, settings)
        try:
            files.write_text(path, content, mode).result()
        except FileSpineError as e:
            fail(e)
    console.print(f"[green]✓[/green] wrote {len(content)} chars to {escape(str(path))}")


@app.command("formats")
def formats(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the registered handlers and the extensions they claim."""
    settings = FileSpineSettings()
    with worker_pool(settings, max_workers=1) as pool:
        files = FileManager.from_settings(pool, settings)
        entries = files.registry.entries

    rows = [
        {
            "position": entry.position,
            "handler": entry.handler.name,
            "format": entry.handler.data_format,
            "capabilities": ", ".join(sorted(tag.value for tag in entry.capabilities)),
            "extensions": ", ".join(entry.handler.extensions),
        }
        for entry in entries
    ]
    if json_out:
        console.print_json(json.dumps(rows))
        return

    print_table(rows, title="Formats")
