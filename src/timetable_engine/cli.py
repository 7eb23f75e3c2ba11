"""CLI entry point for the timetable engine."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .allocation import (
    DEFAULT_CONFIG,
    AllocationConfig,
    GenerationMethod,
    GenerationResult,
    ScheduleOrchestrator,
    ScheduleValidator,
    ValidationReport,
    load_allocation_config,
)
from .catalog import Catalog, CatalogLoader
from .constants import DEFAULT_TIME_LIMIT
from .exceptions import ConfigurationError, TimetableEngineError
from .exporters import (
    CSVExporter,
    TimetableExcelExporter,
    export_generation_json,
    load_schedule_json,
)
from .preferences import (
    ConflictDetector,
    FacultyPreferences,
    PreferenceAwareAllocator,
    PreferenceValidator,
    calculate_preference_completeness,
)

app = typer.Typer(
    name="timetable-engine",
    help="Allocate rooms, time slots and faculty for a weekly timetable",
    add_completion=False,
)
console = Console()

DEFAULT_OUTPUT = Path("output/schedule.json")
MAX_LISTED = 10


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich, DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def _load_catalog(data_dir: Path) -> Catalog:
    with console.status("[bold green]Loading catalogs..."):
        return CatalogLoader(data_dir).load()


@app.command()
def generate(
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory with courses.csv, rooms.csv and faculty.csv"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output JSON file (or directory for CSV)"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    method: Annotated[
        GenerationMethod,
        typer.Option("-m", "--method", help="Generation method"),
    ] = GenerationMethod.HEURISTIC,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Shuffle the time grid with this seed"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("-c", "--config", help="Allocation config JSON file"),
    ] = None,
    time_limit: Annotated[
        int,
        typer.Option("--time-limit", help="CP-SAT time limit in seconds"),
    ] = DEFAULT_TIME_LIMIT,
    excel: Annotated[
        Optional[Path],
        typer.Option("--excel", help="Also write an Excel timetable to this file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Generate a timetable from catalog files."""
    configure_logging(verbose)

    if not data_dir.is_dir():
        console.print(f"[bold red]Error:[/bold red] Directory not found: {data_dir}")
        raise typer.Exit(1)
    if config and not config.exists():
        console.print(f"[bold red]Error:[/bold red] Config file not found: {config}")
        raise typer.Exit(1)

    try:
        catalog = _load_catalog(data_dir)
        allocation_config = _read_config(config) if config else DEFAULT_CONFIG
        orchestrator = ScheduleOrchestrator.create(
            catalog.rooms,
            catalog.time_slots,
            faculty=catalog.faculty,
            config=allocation_config,
            method=method,
            shuffle_seed=seed,
            time_limit=time_limit,
        )
        with console.status(f"[bold green]Generating timetable ({method.value})..."):
            result = orchestrator.generate(catalog.courses, catalog.rooms, catalog.time_slots)
    except TimetableEngineError as e:
        _fail(e)

    console.print(f"\n[bold]Timetable for:[/bold] {data_dir}")
    console.print(f"  Courses: {len(catalog.courses)}")
    console.print(f"  Rooms: {len(catalog.rooms)}")
    console.print(f"  Faculty: {len(catalog.faculty)}")
    console.print(f"  Time slots: {len(catalog.time_slots)}")

    _show_generation_summary(result)
    if verbose:
        _show_room_utilization(result, catalog)
    if catalog.preferences:
        allocator = PreferenceAwareAllocator(
            orchestrator.engine, catalog.preferences, faculty_assigner=orchestrator.faculty_assigner
        )
        _show_satisfaction(allocator.score_schedule(result.slots, catalog.courses, catalog.rooms))

    if result.warnings:
        console.print(f"\n[bold yellow]Warnings ({len(result.warnings)}):[/bold yellow]")
        for warning in result.warnings[:MAX_LISTED]:
            console.print(f"  [yellow]• {escape(warning)}[/yellow]")
        if len(result.warnings) > MAX_LISTED:
            console.print(f"  [yellow]... and {len(result.warnings) - MAX_LISTED} more[/yellow]")

    if result.validation is not None and not result.validation.is_valid:
        _show_report(result.validation)

    output_path = output or DEFAULT_OUTPUT
    if format == OutputFormat.csv:
        output_path = output_path if not output_path.suffix else output_path.parent / output_path.stem
        with console.status(f"[bold green]Exporting to {output_path}..."):
            CSVExporter().export(result, output_path)
    else:
        output_path = output_path if output_path.suffix == ".json" else output_path.with_suffix(".json")
        with console.status(f"[bold green]Exporting to {output_path}..."):
            export_generation_json(result, output_path)
    console.print(f"\n[bold green]✓[/bold green] Schedule exported to: {output_path}")

    if excel:
        excel_path = excel if excel.suffix == ".xlsx" else excel.with_suffix(".xlsx")
        with console.status("[bold green]Generating Excel file..."):
            TimetableExcelExporter(catalog.rooms, catalog.courses, catalog.faculty).export(
                result, excel_path
            )
        console.print(f"[bold green]✓[/bold green] Excel timetable: {excel_path}")


def _read_config(path: Path) -> AllocationConfig:
    try:
        return load_allocation_config(path)
    except json.JSONDecodeError as e:
        raise ConfigurationError("config", str(path), f"a JSON object ({e})") from e


def _show_generation_summary(result: GenerationResult) -> None:
    table = Table(title="Overview", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Method", result.method.value)
    table.add_row("Scheduled hours", str(result.total_scheduled))
    table.add_row("Under-scheduled units", str(len(result.warnings)))

    metrics = result.metrics
    if metrics is not None:
        table.add_row("Success rate", f"{metrics.success_rate:.1f}%")
        table.add_row("Type match accuracy", f"{metrics.type_match_accuracy:.1f}%")
        table.add_row("Facility match rate", f"{metrics.facility_match_rate:.1f}%")
        table.add_row("Conflict rate", f"{metrics.conflict_rate:.1f}%")
        table.add_row("Balance score", f"{metrics.balance_score:.1f}")

    if result.validation is not None:
        table.add_row("Valid", "yes" if result.validation.is_valid else "no")

    console.print()
    console.print(table)


def _show_room_utilization(result: GenerationResult, catalog: Catalog) -> None:
    if result.metrics is None:
        return

    table = Table(title="Room Utilization")
    table.add_column("Room", style="cyan")
    table.add_column("Type", style="blue")
    table.add_column("Capacity", style="magenta")
    table.add_column("Utilization", style="green")
    table.add_column("Efficiency", style="yellow")

    for room in catalog.rooms:
        utilization = result.metrics.room_utilization.get(room.id, 0.0)
        efficiency = result.metrics.capacity_efficiency.get(room.id)
        table.add_row(
            room.name or room.id,
            room.type.value,
            str(room.capacity),
            f"{utilization:.1f}%",
            f"{efficiency:.1f}%" if efficiency is not None else "-",
        )

    console.print()
    console.print(table)


def _show_satisfaction(satisfaction: dict[str, int]) -> None:
    if not satisfaction:
        return

    table = Table(title="Faculty Preference Satisfaction")
    table.add_column("Faculty", style="cyan")
    table.add_column("Score", style="green")
    for faculty_id, score in sorted(satisfaction.items()):
        table.add_row(faculty_id, str(score))

    console.print()
    console.print(table)


def _show_report(report: ValidationReport) -> None:
    if report.errors:
        console.print(f"\n[bold red]Errors ({len(report.errors)}):[/bold red]")
        for issue in report.errors:
            console.print(f"  [red]• {escape(issue.description)}[/red]")

    if report.warnings:
        console.print(f"\n[bold yellow]Warnings ({len(report.warnings)}):[/bold yellow]")
        for issue in report.warnings[:MAX_LISTED]:
            console.print(f"  [yellow]• {escape(issue.description)}[/yellow]")
        if len(report.warnings) > MAX_LISTED:
            console.print(f"  [yellow]... and {len(report.warnings) - MAX_LISTED} more[/yellow]")

    for suggestion in report.suggestions:
        console.print(f"  [cyan]→ {escape(suggestion)}[/cyan]")


@app.command()
def validate(
    schedule_file: Annotated[
        Path,
        typer.Argument(help="Schedule JSON file from the generate command"),
    ],
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory with the catalog files"),
    ],
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Check a schedule for double-booking, capacity, workload and room types."""
    configure_logging(verbose)

    try:
        slots = load_schedule_json(schedule_file)
        catalog = _load_catalog(data_dir)
    except TimetableEngineError as e:
        _fail(e)

    with console.status("[bold green]Validating schedule..."):
        report = ScheduleValidator().validate_timetable(
            slots, catalog.courses, catalog.faculty, catalog.rooms
        )

    console.print(f"\n[bold]Validation Results for:[/bold] {schedule_file.name}")
    console.print(f"  Slots checked: {len(slots)}")

    if report.is_valid:
        console.print("[bold green]✓ Schedule is valid[/bold green]")
    else:
        console.print("[bold red]✗ Schedule has issues[/bold red]")

    _show_report(report)

    if not report.is_valid:
        raise typer.Exit(1)


@app.command("check-preferences")
def check_preferences(
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory with the catalog files and preferences.json"),
    ],
    faculty_id: Annotated[
        str,
        typer.Argument(help="Faculty member to check"),
    ],
    schedule_file: Annotated[
        Optional[Path],
        typer.Option("-s", "--schedule", help="Schedule JSON with existing commitments"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Validate one faculty member's preferences and look for conflicts."""
    configure_logging(verbose)

    try:
        catalog = _load_catalog(data_dir)
        commitments = load_schedule_json(schedule_file) if schedule_file else []
    except TimetableEngineError as e:
        _fail(e)

    member = catalog.get_faculty(faculty_id)
    if member is None:
        console.print(f"[bold red]Error:[/bold red] Faculty member not found: {faculty_id}")
        raise typer.Exit(1)

    preferences = catalog.preferences.get(faculty_id) or FacultyPreferences(faculty_id=faculty_id)
    validation = PreferenceValidator(
        catalog.rooms, catalog.courses, catalog.time_slots
    ).validate_all(preferences, member.department)
    conflicts = ConflictDetector(catalog.rooms, catalog.courses, catalog.faculty).detect_conflicts(
        faculty_id, preferences, commitments
    )

    console.print(f"\n[bold]Preferences of:[/bold] {member.name} ({faculty_id})")
    console.print(f"  Completeness: {calculate_preference_completeness(preferences)}%")
    console.print(f"  Room preferences: {len(preferences.room_preferences)}")
    console.print(f"  Time preferences: {len(preferences.time_preferences)}")
    console.print(f"  Subject preferences: {len(preferences.subject_preferences)}")

    if validation.is_valid:
        console.print("[bold green]✓ Preferences are valid[/bold green]")
    else:
        console.print("[bold red]✗ Preferences have errors[/bold red]")
        for error in validation.errors:
            console.print(f"  [red]• {escape(error.field)}: {escape(error.message)}[/red]")

    if validation.warnings:
        console.print(f"\n[bold yellow]Warnings ({len(validation.warnings)}):[/bold yellow]")
        for warning in validation.warnings:
            console.print(f"  [yellow]• {escape(warning.field)}: {escape(warning.message)}[/yellow]")

    if conflicts.has_conflicts:
        table = Table(title="Conflicts")
        table.add_column("Kind", style="cyan")
        table.add_column("Type", style="blue")
        table.add_column("Severity", style="red")
        table.add_column("Description", style="white")
        for conflict in conflicts.all_conflicts:
            table.add_row(
                conflict.kind.value,
                conflict.type,
                conflict.severity.value,
                escape(conflict.description),
            )
        console.print()
        console.print(table)

        for suggestion in conflicts.suggestions:
            console.print(f"  [cyan]→ {escape(suggestion.description)}[/cyan]")
    else:
        console.print("[bold green]✓ No conflicts detected[/bold green]")

    if not validation.is_valid:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
