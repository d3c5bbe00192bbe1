"""Check orchestrator for Mapset Timing."""

import logging
import time
from collections.abc import Iterator

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import BeatmapSet
from mapset_timing.models.issues import Issue
from mapset_timing.models.pipeline import CheckContext, VerificationResult
from mapset_timing.pipeline.base import Check

console = Console()
logger = logging.getLogger(__name__)


class Verifier:
    """Runs a list of checks over beatmap sets."""

    def __init__(self, checks: list[Check], settings: Settings) -> None:
        """Initialize the verifier.

        Args:
            checks: Checks to run, in reporting order.
            settings: Application settings.
        """
        self.checks = checks
        self.settings = settings

    def run(self, beatmap_set: BeatmapSet, show_progress: bool = False) -> VerificationResult:
        """Run every check on a beatmap set.

        Args:
            beatmap_set: The parsed beatmap set.
            show_progress: Print a spinner and per-check summary to the console.

        Returns:
            VerificationResult with all issues and any per-beatmap errors.
        """
        start_time = time.time()
        context = CheckContext(beatmap_set=beatmap_set, settings=self.settings)
        result = VerificationResult(success=True)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            disable=not show_progress,
        ) as progress:
            for check in self.checks:
                task = progress.add_task(f"[cyan]{check.name}[/cyan]...", total=None)

                check_result = check.run(context)

                progress.remove_task(task)

                result.checks_completed.append(check.name)
                result.issues.extend(check_result.issues)

                if check_result.success:
                    if show_progress:
                        console.print(
                            f"  [green]{check.name}[/green] "
                            f"({len(check_result.issues)} issues, "
                            f"{check_result.duration_seconds:.2f}s)"
                        )
                else:
                    result.success = False
                    result.errors.extend(
                        f"{check.name}: {error}" for error in check_result.errors
                    )
                    for error in check_result.errors:
                        logger.warning("%s: %s", check.name, error)
                    if show_progress:
                        console.print(
                            f"  [red]{check.name}[/red] failed on "
                            f"{len(check_result.errors)} beatmap(s)"
                        )

        result.total_duration = time.time() - start_time
        return result

    def iter_issues(self, beatmap_set: BeatmapSet) -> Iterator[Issue]:
        """Lazily yield issues, check by check and beatmap by beatmap.

        Unlike run(), failures are not isolated here; the first exception
        propagates to the caller.
        """
        context = CheckContext(beatmap_set=beatmap_set, settings=self.settings)
        for check in self.checks:
            for beatmap in beatmap_set.beatmaps:
                if beatmap.mode in check.modes:
                    yield from check.get_issues(context, beatmap)


def create_default_verifier(settings: Settings) -> Verifier:
    """Create a verifier with all default checks.

    Args:
        settings: Application settings.

    Returns:
        Configured Verifier instance.
    """
    from mapset_timing.checks import (
        BeforeLineCheck,
        ConcurrentLinesCheck,
        FirstLineCheck,
        InconsistentLinesCheck,
        KiaiUnsnapCheck,
        RareDivisorCheck,
        SnapConsistencyCheck,
        UnsnapCheck,
        UnusedLinesCheck,
    )

    checks: list[Check] = [
        FirstLineCheck(),
        ConcurrentLinesCheck(),
        UnsnapCheck(settings),
        SnapConsistencyCheck(settings),
        RareDivisorCheck(settings),
        UnusedLinesCheck(settings),
        BeforeLineCheck(settings),
        KiaiUnsnapCheck(settings),
        InconsistentLinesCheck(),
    ]

    return Verifier(checks, settings)
