"""Check processing models for Mapset Timing.

These models track state while a beatmap set moves through the checks.
"""

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap, BeatmapSet
from mapset_timing.models.issues import Issue, IssueLevel

if TYPE_CHECKING:
    from mapset_timing.timeline import Timeline


@dataclass
class CheckContext:
    """Shared, read-only state for one run over a beatmap set.

    Timelines are resolved lazily and cached per beatmap, so checks running
    on several threads can share them.
    """

    beatmap_set: BeatmapSet
    settings: Settings = field(default_factory=Settings)

    _timelines: dict[int, "Timeline"] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def timeline(self, beatmap: Beatmap) -> "Timeline":
        """Timeline of `beatmap`. Raises EmptyTimelineError without timing lines."""
        from mapset_timing.timeline import Timeline

        key = id(beatmap)
        with self._lock:
            timeline = self._timelines.get(key)
            if timeline is None:
                timeline = Timeline(
                    beatmap.timing_lines,
                    snap_tolerance=self.settings.snap_tolerance_ms,
                )
                self._timelines[key] = timeline
        return timeline


@dataclass
class CheckResult:
    """Result of running one check over a beatmap set."""

    success: bool
    check_name: str
    duration_seconds: float
    issues: list[Issue] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class VerificationResult:
    """Final result of running every check."""

    success: bool
    issues: list[Issue] = field(default_factory=list)
    checks_completed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_duration: float = 0.0

    @property
    def highest_level(self) -> IssueLevel | None:
        if not self.issues:
            return None
        return max(issue.level for issue in self.issues)

    def issues_for(self, beatmap: str) -> list[Issue]:
        return [issue for issue in self.issues if issue.beatmap == beatmap]
