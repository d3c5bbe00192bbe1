"""Inconsistent lines check - uninherited lines that differ between difficulties.

All difficulties are based on one song, so they should share the same
uninherited lines. The first difficulty of the set serves as the reference.
"""

import math
from collections.abc import Iterator

from mapset_timing.models.beatmap import Beatmap, Spinner
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.models.timing import UninheritedLine
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline

OPTIONAL_NOTE = " If complex timing this is optional, since there are no hit objects."


def find_uninherited_line(beatmap: Beatmap, offset: float) -> UninheritedLine | None:
    """The uninherited line of `beatmap` at exactly `offset`, if any."""
    for line in beatmap.timing_lines:
        if isinstance(line, UninheritedLine) and line.offset == offset:
            return line
    return None


def section_has_hit_objects(beatmap: Beatmap, timeline: Timeline, offset: float) -> bool:
    """Whether anything but spinners lies between `offset` and the next uninherited line."""
    next_line = timeline.get_next_uninherited_line(offset)
    section_end = next_line.offset if next_line is not None else math.inf
    return any(
        not isinstance(hit_object, Spinner)
        for hit_object in beatmap.objects_between(offset, section_end)
    )


def _templates() -> dict[str, IssueTemplate]:
    templates: dict[str, IssueTemplate] = {}
    for key, text, cause in (
        (
            "Missing",
            "{} - Missing uninherited line, see {}.",
            "A beatmap does not have an uninherited line which the reference beatmap does, or vice versa.",
        ),
        (
            "Inconsistent Meter",
            "{} - Inconsistent meter signature, see {}.",
            "The meter signature of an uninherited line is different from the reference beatmap.",
        ),
        (
            "Inconsistent BPM",
            "{} - Inconsistent BPM, see {}.",
            "Same as the meter check, except checks BPM instead.",
        ),
    ):
        templates[f"{key} Problem"] = IssueTemplate(IssueLevel.PROBLEM, text, cause)
        templates[f"{key} Warning"] = IssueTemplate(
            IssueLevel.WARNING,
            text + OPTIONAL_NOTE,
            "Same as the other check, but there are no hit objects until the next uninherited line.",
        )
    return templates


class InconsistentLinesCheck(Check):
    """Uninherited lines, meter signatures or BPM differing from the first difficulty.

    Sections without hit objects, or with only spinners, are less intrusive
    to gameplay and only warned about.
    """

    message = "Inconsistent uninherited lines, meter signatures or BPM."
    templates = _templates()

    @property
    def name(self) -> str:
        return "inconsistent_lines"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        reference = context.beatmap_set.beatmaps[0]
        if beatmap is reference:
            return

        timeline = context.timeline(beatmap)
        for reference_line in reference.timing_lines:
            if not isinstance(reference_line, UninheritedLine):
                continue

            offset = reference_line.offset
            stamp = format_timestamp(offset)
            severity = "Problem" if section_has_hit_objects(beatmap, timeline, offset) else "Warning"

            line = find_uninherited_line(beatmap, offset)
            if line is None:
                yield self.issue(f"Missing {severity}", beatmap, stamp, reference, time=offset)
                continue

            if line.meter != reference_line.meter:
                yield self.issue(f"Inconsistent Meter {severity}", beatmap, stamp, reference, time=offset)
            if not math.isclose(line.ms_per_beat, reference_line.ms_per_beat):
                yield self.issue(f"Inconsistent BPM {severity}", beatmap, stamp, reference, time=offset)

        # The other way around, the reference should have every uninherited line this one has.
        for line in timeline.uninherited_lines:
            if find_uninherited_line(reference, line.offset) is None:
                yield self.issue(
                    "Missing Problem", reference, format_timestamp(line.offset), beatmap, time=line.offset
                )
