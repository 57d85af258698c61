#!/usr/bin/env python3
"""g1-reader - read Sun 1.6.x G1 GC logs (-XX:+PrintGCDetails) into a structured model.

- Parses pause, detailed pause and concurrent events
- Repairs lines the JVM interleaved with concurrent records
- Reports dropped lines with line number and offset
- Optional JSON dump of the complete model
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

from g1_reader import __version__
from g1_reader.config import ReaderConfig
from g1_reader.errors import LogReadError
from g1_reader.models import GCModel
from g1_reader.reader import G1DataReader, read_gc_log

# ============================================================
# RICH OUTPUT
# ============================================================

G1_READER_THEME = Theme(
    {
        "critical": "bold red",
        "warning": "bold yellow",
        "success": "bold green",
        "info": "cyan",
        "metric": "white",
        "label": "dim white",
        "header": "bold magenta",
    }
)

console = Console(theme=G1_READER_THEME)

MAX_DIAGNOSTIC_ROWS = 20


def configure_logging(verbose: bool) -> None:
    """Send library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def create_key_value_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """Create a simple two-column key/value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="label")
    table.add_column("Value", style="metric")
    for label, value in rows:
        table.add_row(label, value)
    return table


def build_overview_rows(model: GCModel, log_file: Path) -> list[tuple[str, str]]:
    pause_events = model.pause_events
    total_pause = sum(event.pause or 0.0 for event in pause_events)
    rows = [
        ("Log file", str(log_file)),
        ("Format", f"{G1DataReader.format_name} ({model.format.value})"),
        ("Events", str(len(model))),
        ("Stop-the-world events", str(len(pause_events))),
        ("Concurrent events", str(len(model.concurrent_events))),
        ("Total pause time", f"{total_pause:.4f}s"),
        ("Dropped lines", str(len(model.diagnostics))),
    ]
    if model.events:
        rows.append(
            ("Time span", f"{model.events[0].timestamp:.3f}s - {model.events[-1].timestamp:.3f}s")
        )
    return rows


def create_type_table(model: GCModel) -> Table:
    table = Table(title="Events by Type")
    table.add_column("Type", style="label")
    table.add_column("Count", justify="right", style="metric")
    for label, count in sorted(model.count_by_type().items()):
        table.add_row(label, str(count))
    return table


def create_diagnostics_table(model: GCModel) -> Table:
    table = Table(title="Dropped Lines", title_style="warning")
    table.add_column("Line", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Problem")
    table.add_column("Text", overflow="fold")
    for diagnostic in model.diagnostics[:MAX_DIAGNOSTIC_ROWS]:
        table.add_row(
            str(diagnostic.line_number),
            str(diagnostic.index),
            diagnostic.message,
            diagnostic.text,
        )
    return table


def render_summary(model: GCModel, log_file: Path) -> None:
    console.print()
    console.print(create_key_value_table("Parse Overview", build_overview_rows(model, log_file)))
    console.print()
    if model.events:
        console.print(create_type_table(model))
        console.print()
    if model.diagnostics:
        console.print(create_diagnostics_table(model))
        if len(model.diagnostics) > MAX_DIAGNOSTIC_ROWS:
            console.print(
                f"[warning]... {len(model.diagnostics) - MAX_DIAGNOSTIC_ROWS} more[/warning]"
            )
        console.print()


# ============================================================
# TYPER CLI INTERFACE
# ============================================================

app = typer.Typer(
    name="g1-reader",
    help="Reader for Sun 1.6.x G1 garbage-collection logs",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def parse(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Path to GC log file to read",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Print the parsed model as JSON instead of a summary",
        ),
    ] = False,
    encoding: Annotated[
        str,
        typer.Option(
            "--encoding",
            help="Character encoding of the log file (default: utf-8)",
        ),
    ] = "utf-8",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging with full detail for dropped lines",
        ),
    ] = False,
) -> None:
    """Parse a G1 GC log file.

    Exit codes: 0 = events parsed, 1 = no events or read failure.
    """
    configure_logging(verbose)
    config = ReaderConfig(encoding=encoding)

    try:
        model = read_gc_log(log_file, config)
    except LogReadError as e:
        console.print(f"[critical]ERROR: {e}[/critical]")
        if e.model.events:
            console.print(f"[info]{len(e.model)} events were read before the failure[/info]")
        sys.exit(1)

    if as_json:
        typer.echo(model.model_dump_json(indent=2))
    else:
        render_summary(model, log_file)

    if not model.events:
        console.print("[critical]ERROR: No usable GC events found in log file[/critical]")
        sys.exit(1)


@app.command()
def version() -> None:
    """Display version."""
    console.print(f"g1-reader {__version__}")


if __name__ == "__main__":
    app()
