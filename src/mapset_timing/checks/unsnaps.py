"""Unsnap check - hit object edges that are off the beat snap grid."""

from collections.abc import Iterator

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline


def classify_unsnap(unsnap: float, settings: Settings) -> IssueLevel | None:
    """Severity of an unsnap in ms, or None if it counts as snapped.

    Editors round times to whole milliseconds, so anything below the minor
    threshold is treated as snapped.
    """
    magnitude = abs(unsnap)
    if magnitude >= settings.unsnap_problem_ms:
        return IssueLevel.PROBLEM
    if magnitude >= settings.unsnap_minor_ms:
        return IssueLevel.MINOR
    return None


def is_unsnap_problem(timeline: Timeline, time: float, settings: Settings) -> bool:
    """Whether `time` is unsnapped badly enough to be a problem."""
    level = classify_unsnap(timeline.get_practical_unsnap(time), settings)
    return level is IssueLevel.PROBLEM


class UnsnapCheck(Check):
    """Hit object heads, repeats and tails unsnapped from 1/12 and 1/16."""

    message = "Unsnapped hit objects."
    templates = {
        "Problem": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - {} unsnapped by {} ms.",
            "A hit object is snapped at least 2 ms too early or late for either "
            "of the 1/12 or 1/16 beat snap divisors.",
        ),
        "Minor": IssueTemplate(
            IssueLevel.MINOR,
            "{} - {} unsnapped by {} ms.",
            "Same as the other check, but by 1 ms or more instead.",
        ),
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        return "unsnaps"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)

        for hit_object in beatmap.hit_objects:
            for edge_time in hit_object.edge_times():
                unsnap = timeline.get_practical_unsnap(edge_time)
                level = classify_unsnap(unsnap, self.settings)
                if level is None:
                    continue

                template = "Problem" if level is IssueLevel.PROBLEM else "Minor"
                yield self.issue(
                    template,
                    beatmap,
                    format_timestamp(edge_time),
                    hit_object.describe_edge(edge_time),
                    round(unsnap, 3),
                    time=edge_time,
                )
