"""timeblock CLI for inspecting record fixtures."""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from timeblock.config import PipelineConfig, settings
from timeblock.errors import ConfigurationError
from timeblock.logger import configure_logging
from timeblock.models import Category, Record
from timeblock.pipeline import (
    IntervalParser,
    Orchestrator,
    format_interval,
    format_time_range,
    snap_to_grid,
)

app = typer.Typer(
    name="timeblock",
    help="Extract and lay out time blocks from outline records",
    add_completion=False,
)
console = Console()


def _load_json(path: Path) -> list:
    if not path.exists():
        raise typer.BadParameter(f"File not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a JSON list")
    return data


def _load_records(path: Path) -> list[Record]:
    try:
        return [Record(**item) for item in _load_json(path)]
    except (TypeError, ValidationError) as e:
        raise typer.BadParameter(f"{path} has malformed records: {e}") from e


@app.command()
def parse(
    text: str = typer.Argument(..., help="Text to parse for a time range"),
    snap: bool = typer.Option(False, help="Also show the range snapped to the grid"),
) -> None:
    """Parse a single line and show the interval it contains."""
    found = IntervalParser().match(text)
    if found is None:
        console.print("[yellow]No interval found[/yellow]")
        raise typer.Exit(code=1)

    interval = found.interval
    console.print(f"[bold blue]Format:[/bold blue] {found.format.value}")
    console.print(f"[bold blue]Range:[/bold blue] {format_interval(interval)}")
    if snap:
        start = snap_to_grid(interval.start_minute, settings.snap_granularity)
        end = max(start, snap_to_grid(interval.end_minute, settings.snap_granularity))
        console.print(
            f"[bold blue]Snapped:[/bold blue] "
            f"{format_time_range(start // 60, start % 60, end // 60, end % 60)}"
        )
    console.print(f"[dim]Minutes {interval.start_minute}-{interval.end_minute}, "
                  f"matched {escape(repr(interval.source_text))} at {found.span}[/dim]")


@app.command()
def layout(
    records_path: Path = typer.Argument(..., help="JSON list of records for the day"),
    categories_path: Optional[Path] = typer.Option(
        None, "--categories", help="JSON list of categories (defaults to settings)"
    ),
    next_day_path: Optional[Path] = typer.Option(
        None, "--next-day", help="JSON list of next-day records"
    ),
    context_path: Optional[Path] = typer.Option(
        None, "--context", help="JSON list of ancestor records outside the day"
    ),
) -> None:
    """Run the pipeline over a records file and print the placement."""
    configure_logging(settings.log_level)

    categories = None
    if categories_path is not None:
        try:
            categories = [Category(**item) for item in _load_json(categories_path)]
        except (TypeError, ValidationError) as e:
            raise typer.BadParameter(f"{categories_path} has malformed categories: {e}") from e

    try:
        orchestrator = Orchestrator(PipelineConfig.from_settings(settings, categories))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=2)

    content_by_id = parent_by_id = None
    if context_path is not None:
        context = _load_records(context_path)
        content_by_id = {record.id: record.text for record in context}
        parent_by_id = {record.id: record.parent_id for record in context}

    results = orchestrator.run_day(
        _load_records(records_path),
        _load_records(next_day_path) if next_day_path else None,
        content_by_id,
        parent_by_id,
    )

    table = Table(title=f"Time blocks: {records_path.name}")
    table.add_column("Time")
    table.add_column("Column", justify="right")
    table.add_column("Category")
    table.add_column("Text")
    for item in results:
        color = item.color(settings.default_color)
        label = item.category.label if item.category else "-"
        table.add_row(
            format_interval(item.interval) + (" (+1)" if item.interval.is_shifted else ""),
            f"{item.column + 1}/{item.total_columns}",
            f"[{color}]{escape(label)}[/]",
            escape(item.record.text),
        )
    console.print(table)
    console.print(f"[dim]{len(results)} time blocks[/dim]")


@app.command()
def config() -> None:
    """Show effective settings."""
    console.print("[bold blue]timeblock settings[/bold blue]")
    console.print(f"Visible hours: {settings.day_start_hour}-{settings.day_end_hour}")
    console.print(f"Next-day boundary hour: {settings.next_day_boundary_hour}")
    console.print(f"Max depth: {settings.max_depth}")
    console.print(f"Snap granularity: {settings.snap_granularity} min")
    console.print()
    for category in settings.load_categories():
        console.print(f"[{category.color}]{escape(category.label)}[/] "
                      f"{escape(', '.join(category.patterns))}")


if __name__ == "__main__":
    app()
