"""
Pathway CLI - plan and re-plan learning paths from JSON files.

A thin front-end over src.learning_path for local planning, fixtures and
debugging. The engine itself never touches files; this module loads the
reference data, calls build/adapt, and renders the result.

Usage:
    pathway build catalogue.json profile.json --user u1 --subject maths --key-stage KS2
    pathway build catalogue.json profile.json -u u1 -s maths -k KS2 --results history.json -o path.json
    pathway adapt path.json catalogue.json profile.json new_results.json -o path.json
    pathway show path.json

File formats:
    catalogue.json  {"topics": [...CurriculumTopic], "resources": [...LearningResource]}
    profile.json    UserLearningProfile
    results.json    [...AssessmentResult]
    path.json       LearningPath (as written by --output)
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from src.learning_path import (
    AdaptationEvent,
    AssessmentResult,
    CurriculumTopic,
    KeyStage,
    LearningPath,
    LearningPathError,
    LearningResource,
    PathGenerationParams,
    PathPolicy,
    ProficiencyLevel,
    Subject,
    UserLearningProfile,
    adapt,
    build,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="pathway",
    help="Personalised learning path planner",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

_topics_adapter = TypeAdapter(list[CurriculumTopic])
_resources_adapter = TypeAdapter(list[LearningResource])
_profile_adapter = TypeAdapter(UserLearningProfile)
_results_adapter = TypeAdapter(list[AssessmentResult])
_path_adapter = TypeAdapter(LearningPath)
_event_adapter = TypeAdapter(AdaptationEvent)


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and optionally a file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")


# =============================================================================
# File I/O
# =============================================================================


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {escape(str(e))}[/]")
        raise typer.Exit(1)


def load_catalogue(path: Path) -> tuple[list[CurriculumTopic], list[LearningResource]]:
    data = _read_json(path)
    return (
        _topics_adapter.validate_python(data.get("topics", [])),
        _resources_adapter.validate_python(data.get("resources", [])),
    )


def load_profile(path: Path) -> UserLearningProfile:
    return _profile_adapter.validate_python(_read_json(path))


def load_results(path: Path | None) -> list[AssessmentResult]:
    if path is None:
        return []
    return _results_adapter.validate_python(_read_json(path))


def load_path(path: Path) -> LearningPath:
    return _path_adapter.validate_python(_read_json(path))


def write_json(path: Path, payload: bytes) -> None:
    path.write_bytes(payload + b"\n")
    console.print(f"[dim]Wrote {path}[/]")


# =============================================================================
# Rendering
# =============================================================================


def render_path(path: LearningPath) -> None:
    """Print a path summary panel and its unit table."""
    console.print(
        Panel(
            f"[bold cyan]{path.title}[/]\n"
            f"Path: {path.id}\n"
            f"Learner: {path.user_id}  Key stage: {path.key_stage.value}\n"
            f"Progress: {path.overall_progress}%  "
            f"Estimated completion: {path.estimated_completion_date.date().isoformat()}\n"
            f"Adaptation intensity: {path.adaptation_intensity}",
            border_style="cyan",
        )
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Unit")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Proficiency")
    table.add_column("Minutes", justify="right")
    table.add_column("Resources")

    for unit in path.units:
        table.add_row(
            str(unit.position + 1),
            unit.title or unit.topic_id,
            f"[{unit.status.color}]{unit.status.value}[/]",
            f"{unit.progress}%",
            unit.proficiency_level.display_name if unit.proficiency_level else "-",
            str(unit.estimated_duration),
            ", ".join(resource.id for resource in unit.resources) or "[dim]none[/]",
        )

    console.print(table)


def render_event(event: AdaptationEvent, unknown_topic_ids: tuple[str, ...]) -> None:
    changes = event.changes
    lines = [
        f"[bold]{event.reason}[/]",
        f"Event: {event.id}",
        f"Resources changed: {'yes' if changes.resources_changed else 'no'}",
        f"Difficulty changed: {'yes' if changes.difficulty_changed else 'no'}",
        f"Reordered: {'yes' if changes.reordered_units else 'no'}",
    ]
    if unknown_topic_ids:
        lines.append(f"[yellow]Skipped unknown topics: {', '.join(unknown_topic_ids)}[/]")
    console.print(Panel("\n".join(lines), title="Adaptation", border_style="magenta"))


# =============================================================================
# Commands
# =============================================================================


@app.command("build")
def build_command(
    catalogue: Annotated[Path, typer.Argument(help="Catalogue JSON (topics + resources)")],
    profile: Annotated[Path, typer.Argument(help="Learner profile JSON")],
    user: Annotated[str, typer.Option("--user", "-u", help="Learner identifier")],
    subject: Annotated[Subject, typer.Option("--subject", "-s", help="Subject")],
    key_stage: Annotated[KeyStage, typer.Option("--key-stage", "-k", help="Key stage")],
    focus: Annotated[
        list[str] | None, typer.Option("--focus", "-f", help="Focus topic id (repeatable)")
    ] = None,
    exclude: Annotated[
        list[str] | None, typer.Option("--exclude", "-x", help="Excluded topic id (repeatable)")
    ] = None,
    prerequisites: Annotated[
        bool, typer.Option("--prerequisites/--no-prerequisites", help="Include prerequisites")
    ] = True,
    intensity: Annotated[
        int | None, typer.Option("--intensity", "-i", min=1, max=10, help="Adaptation intensity")
    ] = None,
    proficiency: Annotated[
        ProficiencyLevel | None, typer.Option("--proficiency", help="Override starting proficiency")
    ] = None,
    results: Annotated[
        Path | None, typer.Option("--results", "-r", help="Assessment history JSON")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the path JSON here")
    ] = None,
) -> None:
    """
    Build a new learning path.

    Examples:
        pathway build catalogue.json profile.json -u u1 -s maths -k KS2
        pathway build catalogue.json profile.json -u u1 -s maths -k KS2 -f fractions -o path.json
    """
    settings = get_settings()
    try:
        topics, resources = load_catalogue(catalogue)
        params = PathGenerationParams(
            user_id=user,
            subject=subject,
            key_stage=key_stage,
            focus_topics=tuple(focus) if focus else None,
            exclude_topics=tuple(exclude or ()),
            include_prerequisites=prerequisites,
            starting_proficiency=proficiency,
            adaptation_intensity=intensity or settings.default_adaptation_intensity,
        )
        path = build(
            params,
            topics,
            resources,
            load_profile(profile),
            load_results(results),
            policy=PathPolicy.from_settings(settings),
        )
    except (LearningPathError, ValidationError) as e:
        console.print(f"[red]Cannot build path: {escape(str(e))}[/]")
        raise typer.Exit(1)

    render_path(path)
    if output:
        write_json(output, _path_adapter.dump_json(path, indent=2))


@app.command("adapt")
def adapt_command(
    path_file: Annotated[Path, typer.Argument(help="Existing path JSON")],
    catalogue: Annotated[Path, typer.Argument(help="Catalogue JSON (topics + resources)")],
    profile: Annotated[Path, typer.Argument(help="Learner profile JSON")],
    results: Annotated[Path, typer.Argument(help="New assessment results JSON")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the updated path JSON here")
    ] = None,
    event_output: Annotated[
        Path | None, typer.Option("--event-output", "-e", help="Write the adaptation event here")
    ] = None,
) -> None:
    """
    Apply new assessment results to a saved path.

    Examples:
        pathway adapt path.json catalogue.json profile.json week3.json -o path.json
    """
    settings = get_settings()
    try:
        topics, resources = load_catalogue(catalogue)
        outcome = adapt(
            load_path(path_file),
            load_results(results),
            topics,
            resources,
            load_profile(profile),
            policy=PathPolicy.from_settings(settings),
        )
    except (LearningPathError, ValidationError) as e:
        console.print(f"[red]Cannot adapt path: {escape(str(e))}[/]")
        raise typer.Exit(1)

    render_event(outcome.event, outcome.unknown_topic_ids)
    render_path(outcome.updated_path)
    if output:
        write_json(output, _path_adapter.dump_json(outcome.updated_path, indent=2))
    if event_output:
        write_json(event_output, _event_adapter.dump_json(outcome.event, indent=2))


@app.command("show")
def show_command(
    path_file: Annotated[Path, typer.Argument(help="Path JSON")],
) -> None:
    """Display a saved learning path."""
    try:
        path = load_path(path_file)
    except ValidationError as e:
        console.print(f"[red]Invalid path file: {escape(str(e))}[/]")
        raise typer.Exit(1)
    render_path(path)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    run()
