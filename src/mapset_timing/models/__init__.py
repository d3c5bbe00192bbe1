"""Data models for Mapset Timing."""

from mapset_timing.models.beatmap import (
    Beatmap,
    BeatmapSet,
    Circle,
    HitObject,
    HoldNote,
    Mode,
    Slider,
    Spinner,
)
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext, CheckResult, VerificationResult
from mapset_timing.models.timing import (
    InheritedLine,
    Sampleset,
    TimingLine,
    UninheritedLine,
)

__all__ = [
    "Beatmap",
    "BeatmapSet",
    "CheckContext",
    "CheckResult",
    "Circle",
    "HitObject",
    "HoldNote",
    "InheritedLine",
    "Issue",
    "IssueLevel",
    "IssueTemplate",
    "Mode",
    "Sampleset",
    "Slider",
    "Spinner",
    "TimingLine",
    "UninheritedLine",
    "VerificationResult",
    "format_timestamp",
]
