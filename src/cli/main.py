"""
Typer CLI for the lesson migration engine.

Commands:
    lessons detect FILE        - Show the detected format of every record
    lessons stats FILE         - Show aggregate migration statistics
    lessons migrate FILE       - Migrate records to the canonical format
    lessons validate FILE      - Validate canonical lessons
    lessons version            - Show version information

FILE holds a JSON list of lesson records, or a JSON object mapping
lesson ids to records.

Usage:
    lessons --help
    lessons migrate data/lessons.json --output canonical.json --report report.md
    lessons validate canonical.json --original data/lessons.json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.lessons import (
    BlockFactory,
    FormatDetector,
    LessonMigrator,
    MigrationOrchestrator,
    batch_validate,
    migration_stats,
)
from src.lessons.report import render_migration_report, render_validation_report

app = typer.Typer(
    help="lessons CLI: classify, migrate and validate lesson records",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Lesson format migration and validation."""
    level = "DEBUG" if verbose else get_settings().log_level
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


# ========================================
# Input / Output helpers
# ========================================


def load_records(path: Path) -> list[Any]:
    """
    Load lesson records from a JSON file.

    A JSON object is read as id -> record; records missing an id take
    their key as id.
    """
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [
            {**record, "id": key} if isinstance(record, dict) and "id" not in record else record
            for key, record in data.items()
        ]

    console.print(f"[red]Error: {path} must hold a list or an object of lessons[/red]")
    raise typer.Exit(1)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")


def _ref(record: Any) -> str:
    if isinstance(record, dict):
        return str(record.get("id") or record.get("title") or "-")
    return "-"


# ========================================
# Commands
# ========================================


@app.command("detect")
def detect_command(
    source: Path = typer.Argument(..., help="JSON file of lesson records"),
) -> None:
    """Show the detected format of every record."""
    records = load_records(source)
    detector = FormatDetector()

    table = Table(title=f"Detected formats ({len(records)} records)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Lesson", style="cyan")
    table.add_column("Format", style="green")

    for index, record in enumerate(records):
        table.add_row(str(index), _ref(record), detector.detect(record).value)

    console.print(table)


@app.command("stats")
def stats_command(
    source: Path = typer.Argument(..., help="JSON file of lesson records"),
    as_json: bool = typer.Option(False, "--json", help="Print stats as JSON"),
) -> None:
    """Show aggregate migration statistics."""
    stats = migration_stats(load_records(source))

    if as_json:
        console.print_json(json.dumps(stats.to_dict()))
        return

    table = Table(title=f"Migration stats ({stats.total} lessons)")
    table.add_column("Format", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for name, count in stats.by_format.items():
        table.add_row(name, str(count))
    console.print(table)

    rprint(f"  Needs migration:  {stats.needs_migration}")
    rprint(f"  Already migrated: {stats.already_migrated}")
    rprint(f"  Completion:       {stats.completion_percentage:.1f}%")


@app.command("migrate")
def migrate_command(
    source: Path = typer.Argument(..., help="JSON file of lesson records"),
    output: Path = typer.Option(None, "--output", "-o", help="Write canonical lessons to JSON"),
    report: Path = typer.Option(None, "--report", "-r", help="Write a markdown migration report"),
    seed: int = typer.Option(None, "--seed", help="Seed block ids and timestamps for reproducible output"),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any record failed or has issues"),
) -> None:
    """
    Migrate lesson records to the canonical block format.

    Examples:
        lessons migrate lessons.json --output canonical.json
        lessons migrate lessons.json --seed 42 --report migration.md
    """
    records = load_records(source)
    factory = BlockFactory.seeded(seed) if seed is not None else BlockFactory()
    orchestrator = MigrationOrchestrator(migrator=LessonMigrator(factory=factory))

    console.print(f"\n[bold cyan]Migrating {len(records)} lessons[/bold cyan] from {source}")
    result = orchestrator.run(records)

    table = Table(title="Migration results")
    table.add_column("Bucket", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Migrated", str(len(result.migrated)))
    table.add_row("Migrated with issues", str(len(result.issues)))
    table.add_row("Already migrated", str(len(result.already_migrated)))
    table.add_row("Failed", str(len(result.failed)))
    console.print(table)
    rprint(f"  Completion before run: {result.completion_percentage:.1f}%")

    for outcome in result.issues:
        rprint(f"[yellow]⚠[/yellow] {outcome.lesson_id}:")
        for error in outcome.report.errors:
            rprint(f"    [red]✗[/red] {error}")

    for failure in result.failed:
        rprint(f"[red]✗[/red] record {failure.index} ({failure.lesson_ref}): {failure.error}")

    if output:
        write_json(output, result.canonical_lessons())
        rprint(f"[green]✓[/green] Wrote {result.succeeded} canonical lessons to {output}")

    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(render_migration_report(result), encoding="utf-8")
        rprint(f"[green]✓[/green] Wrote migration report to {report}")

    if strict and (result.failed or result.issues):
        raise typer.Exit(1)


@app.command("validate")
def validate_command(
    source: Path = typer.Argument(..., help="JSON file of canonical lessons"),
    original: Path = typer.Option(None, "--original", help="JSON file of the raw records"),
    report: Path = typer.Option(None, "--report", "-r", help="Write a markdown validation report"),
) -> None:
    """Validate canonical lessons, optionally against their originals."""
    lessons = load_records(source)
    originals: dict[str, Any] = {}
    if original:
        originals = {
            record["id"]: record
            for record in load_records(original)
            if isinstance(record, dict) and isinstance(record.get("id"), str)
        }

    results = batch_validate(lessons, originals)

    table = Table(title=f"Validation ({results.total_lessons} lessons)")
    table.add_column("Lesson", style="cyan")
    table.add_column("Valid", justify="center")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Warnings", justify="right", style="yellow")
    for result in results.results:
        table.add_row(
            str(result.lesson_id),
            "[green]✓[/green]" if result.report.is_valid else "[red]✗[/red]",
            str(len(result.report.errors)),
            str(len(result.report.warnings)),
        )
    console.print(table)

    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(render_validation_report(results), encoding="utf-8")
        rprint(f"[green]✓[/green] Wrote validation report to {report}")

    if results.invalid_lessons:
        raise typer.Exit(1)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    settings = get_settings()
    rprint("[bold]lesson-migration[/bold] v1.0.0")
    rprint(f"  Canonical format version {settings.migration_version}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
