"""Main CLI entry point for Mapset Timing."""

import json
import logging
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from mapset_timing import __version__
from mapset_timing.config import Settings, get_settings
from mapset_timing.models.issues import Issue, IssueLevel, format_timestamp

console = Console()
error_console = Console(stderr=True)

LEVEL_STYLES = {
    IssueLevel.MINOR: "dim",
    IssueLevel.WARNING: "yellow",
    IssueLevel.PROBLEM: "bold red",
}


@click.group()
@click.version_option(version=__version__, prog_name="mapset-timing")
def main() -> None:
    """Mapset Timing - Timing analysis for rhythm game beatmap sets.

    Find unsnapped objects, rarely used beat snap divisors, snapping that
    differs between difficulties, and redundant or conflicting timing lines.
    """
    pass


@main.command()
@click.argument("mapset_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--min-level",
    type=click.Choice([level.name.lower() for level in IssueLevel]),
    default="minor",
    show_default=True,
    help="Least severe issue level to show",
)
@click.option(
    "--nightcore-cymbals/--no-nightcore-cymbals",
    default=None,
    help="Report uninherited lines that only shift nightcore mod cymbals",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    help="Threads used for cross-difficulty comparison",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print issues as JSON instead of a report",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show diagnostic logging",
)
def check(
    mapset_json: Path,
    min_level: str,
    nightcore_cymbals: bool | None,
    workers: int | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Check the timing of a beatmap set.

    Reads MAPSET_JSON, a beatmap set in the JSON interchange format, runs
    every timing check and prints the issues found. Exits with status 1 if
    any problem is found or a check could not run on some difficulty.
    """
    from mapset_timing.loader import BeatmapLoadError, load_beatmap_set
    from mapset_timing.pipeline import create_default_verifier

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )

    settings = get_settings()

    # Apply CLI overrides
    if nightcore_cymbals is not None:
        settings.nightcore_cymbals = nightcore_cymbals
    if workers is not None:
        settings.max_workers = workers

    try:
        beatmap_set = load_beatmap_set(mapset_json)
    except BeatmapLoadError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise SystemExit(1)

    if not as_json:
        console.print(f"[bold blue]Mapset Timing[/bold blue] v{__version__}")
        console.print(f"Checking: [green]{beatmap_set.title or mapset_json}[/green]")
        console.print()

    verifier = create_default_verifier(settings)
    result = verifier.run(beatmap_set, show_progress=not as_json)

    threshold = IssueLevel[min_level.upper()]
    issues = [issue for issue in result.issues if issue.level >= threshold]

    if as_json:
        click.echo(
            json.dumps(
                {
                    "success": result.success,
                    "issues": [_issue_to_dict(issue) for issue in issues],
                    "errors": result.errors,
                },
                indent=2,
                ensure_ascii=False,
            )
        )
    else:
        _print_report(beatmap_set.beatmaps, issues)
        for error in result.errors:
            console.print(f"[red]Error: {escape(error)}[/red]")

    if not result.success or result.highest_level is IssueLevel.PROBLEM:
        raise SystemExit(1)


def _issue_to_dict(issue: Issue) -> dict:
    data = asdict(issue)
    data["level"] = str(issue.level)
    data["timestamp"] = format_timestamp(issue.time) if issue.time is not None else None
    return data


def _print_report(beatmaps: list, issues: list[Issue]) -> None:
    """Print issues grouped by difficulty, in set order."""
    console.print()
    if not issues:
        console.print("[bold green]No issues found.[/bold green]")
        return

    for beatmap in beatmaps:
        beatmap_issues = [issue for issue in issues if issue.beatmap == str(beatmap)]
        if not beatmap_issues:
            continue

        console.print(f"[bold]{beatmap}[/bold]")
        for issue in beatmap_issues:
            style = LEVEL_STYLES[issue.level]
            console.print(f"  [{style}]{issue.level}[/{style}] {escape(issue.message)}", highlight=False)
        console.print()

    counts = {level: sum(1 for issue in issues if issue.level is level) for level in IssueLevel}
    summary = ", ".join(f"{count} {level}" for level, count in reversed(counts.items()) if count)
    console.print(f"Found {len(issues)} issues ({summary})")


@main.command()
def info() -> None:
    """Show current configuration."""
    settings = get_settings()

    console.print("[bold]Configuration[/bold]")
    for name in Settings.model_fields:
        console.print(f"  {name}: {getattr(settings, name)}", highlight=False)


@main.command(name="checks")
def list_checks() -> None:
    """List the checks and what each of their issues means."""
    from mapset_timing.pipeline import create_default_verifier

    verifier = create_default_verifier(get_settings())

    for check in verifier.checks:
        console.print(f"[bold]{check.name}[/bold] [dim]({check.category})[/dim] {escape(check.message)}")
        for key, template in check.templates.items():
            style = LEVEL_STYLES[template.level]
            console.print(
                f"  [{style}]{template.level}[/{style}] {escape(key)}: {escape(template.cause)}",
                highlight=False,
            )
        console.print()


if __name__ == "__main__":
    main()
