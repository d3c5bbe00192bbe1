"""Unused lines check - timing lines that change nothing observable.

Uninherited lines placed on-beat with the previous uninherited line may shift
timing by a millisecond each due to rounding, so redundant ones are problems.
Unused inherited lines are harmless, essentially bookmarks, and only minor.

Whether a line is "used" is approximated so that it only errs towards used,
so a used line is never reported as unused.

Shifting the nightcore mod cymbals only counts as a reason for a line when
the nightcore_cymbals setting is on. It is off by default, so such a line is
a problem rather than a warning unless enabled.
"""

import math
from collections.abc import Iterator

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap, HitObject, Mode, Slider
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.models.timing import InheritedLine, TimingLine, UninheritedLine, sv_mult_of
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline


def get_beat_offset(line: UninheritedLine, next_line: UninheritedLine, beat_modulo: float) -> float:
    """Distance in ms between `next_line` and the closest multiple of `beat_modulo` beats of `line`."""
    beats_in = (next_line.offset - line.offset) / line.ms_per_beat
    offset = beats_in % beat_modulo
    return min(abs(offset), abs(offset - beat_modulo)) * line.ms_per_beat


def downbeats_align(line: UninheritedLine, other_line: UninheritedLine, tolerance: float) -> bool:
    """Whether both lines share bpm, meter and downbeat structure."""
    if not (line.has_valid_tempo and other_line.has_valid_tempo) or other_line.meter <= 0:
        return False
    return (
        math.isclose(line.ms_per_beat, other_line.ms_per_beat)
        and line.meter == other_line.meter
        and get_beat_offset(other_line, line, other_line.meter) <= tolerance
    )


def bar_lines_align(line: UninheritedLine, other_line: UninheritedLine) -> bool:
    """Whether the barlines of both lines coincide exactly.

    Assumes the downbeats already align. Even a 1 ms difference shows as two
    barlines next to each other.
    """
    return math.isclose(get_beat_offset(other_line, line, other_line.meter), 0.0, abs_tol=1e-6)


def nightcore_cymbals_align(line: UninheritedLine, other_line: UninheritedLine, tolerance: float) -> bool:
    """Whether the lines are a multiple of 4 measures apart.

    The nightcore mod adds a cymbal every 4 measures counted from the line.
    """
    return (
        downbeats_align(line, other_line, tolerance)
        and get_beat_offset(other_line, line, 4 * other_line.meter) <= tolerance
    )


def can_omit_bar_line(mode: Mode) -> bool:
    # Standard converts to taiko and mania, so it counts as well.
    return mode in (Mode.STANDARD, Mode.TAIKO, Mode.MANIA)


def section_contains(
    beatmap: Beatmap,
    timeline: Timeline,
    line: TimingLine,
    kind: type[HitObject] = HitObject,
    include_bodies: bool = False,
) -> bool:
    """Whether a hit object of `kind` lies in the section `line` starts."""
    next_line = timeline.get_next_timing_line(line.offset)
    section_end = next_line.offset if next_line is not None else math.inf
    return bool(beatmap.objects_between(line.offset, section_end, kind, include_bodies))


def can_use_sv(beatmap: Beatmap, timeline: Timeline, line: TimingLine) -> bool:
    # Taiko and mania scroll speed follows slider velocity.
    return beatmap.mode in (Mode.TAIKO, Mode.MANIA) or section_contains(beatmap, timeline, line, Slider)


def sv_differs(line: TimingLine, previous_line: TimingLine) -> bool:
    return not math.isclose(sv_mult_of(line), sv_mult_of(previous_line))


def uses_samples(beatmap: Beatmap, timeline: Timeline, line: TimingLine, previous_line: TimingLine) -> bool:
    return line.samples_differ(previous_line) and section_contains(
        beatmap, timeline, line, include_bodies=True
    )


def uses_sv(beatmap: Beatmap, timeline: Timeline, line: TimingLine, previous_line: TimingLine) -> bool:
    return sv_differs(line, previous_line) and can_use_sv(beatmap, timeline, line)


def is_line_used(beatmap: Beatmap, timeline: Timeline, line: TimingLine, previous_line: TimingLine) -> bool:
    """Whether `line` changes sample, slider velocity or kiai in a way anything uses."""
    return (
        uses_samples(beatmap, timeline, line, previous_line)
        or uses_sv(beatmap, timeline, line, previous_line)
        or line.kiai != previous_line.kiai
    )


class UnusedLinesCheck(Check):
    """Uninherited lines that could be removed or be inherited, and unused inherited lines."""

    message = "Unused timing lines."
    templates = {
        "Problem": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - Uninherited line changes nothing.",
            "An uninherited line is placed on a multiple of 4 downbeats away from the previous "
            "uninherited line, and changes no settings.",
        ),
        "Problem Inherited": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - Uninherited line changes nothing that can't be changed with an inherited line.",
            "Same as the first check, but changes volume, sampleset, or another setting that an "
            "inherited line could change instead.",
        ),
        "Warning": IssueTemplate(
            IssueLevel.WARNING,
            "{} - Uninherited line changes nothing, other than {}, ensure this makes sense.",
            "Same as the first check, but changes something that inherited lines cannot, yet "
            "isn't immediately obvious.",
        ),
        "Warning Inherited": IssueTemplate(
            IssueLevel.WARNING,
            "{} - Uninherited line changes nothing that can't be changed with an inherited line, "
            "other than {}, ensure this makes sense.",
            "Same as the second check, but changes something that inherited lines cannot, yet "
            "isn't immediately obvious.",
        ),
        "Minor Inherited": IssueTemplate(
            IssueLevel.MINOR,
            "{} - Inherited line changes {}.",
            "An inherited line changes no settings, or none that affect anything.",
        ),
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        return "unused_lines"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)
        yield from self._uninherited_line_issues(beatmap, timeline)
        yield from self._inherited_line_issues(beatmap, timeline)

    def _uninherited_line_issues(self, beatmap: Beatmap, timeline: Timeline) -> Iterator[Issue]:
        tolerance = self.settings.downbeat_tolerance_ms

        for line in timeline.uninherited_lines[1:]:
            # Looking just before the line skips any inherited line on top of it.
            previous_line = timeline.get_timing_line(line.offset - 1)
            previous_red = timeline.get_uninherited_line(line.offset - 1)
            if previous_red is line or not downbeats_align(line, previous_red, tolerance):
                continue

            omitting_bar_line = False
            correcting_bar_line = False
            if can_omit_bar_line(beatmap.mode):
                # A line mid-measure omits its barline, and another line then corrects
                # the barline at the end of that measure.
                omitting_bar_line = line.omits_bar_line
                correcting_bar_line = previous_red.omits_bar_line and not bar_lines_align(line, previous_red)
                # Omitted barlines are rare in standard, so only warn there.
                if (omitting_bar_line or correcting_bar_line) and beatmap.mode != Mode.STANDARD:
                    continue

            reasons: list[str] = []
            if omitting_bar_line:
                reasons.append("omitting first barline")
            if correcting_bar_line:
                reasons.append(f"correcting the omitted barline at {format_timestamp(previous_red.offset)}")
            if self.settings.nightcore_cymbals and not nightcore_cymbals_align(line, previous_red, tolerance):
                reasons.append("nightcore mod cymbals")

            # An inherited line on the same offset decides the effective settings.
            effective_line = timeline.get_timing_line(line.offset)
            used = is_line_used(beatmap, timeline, effective_line, previous_line)

            template = "Problem Inherited" if used else "Problem"
            if reasons:
                template = "Warning Inherited" if used else "Warning"
                yield self.issue(
                    template, beatmap, format_timestamp(line.offset), " and ".join(reasons), time=line.offset
                )
            else:
                yield self.issue(template, beatmap, format_timestamp(line.offset), time=line.offset)

    def _inherited_line_issues(self, beatmap: Beatmap, timeline: Timeline) -> Iterator[Issue]:
        for previous_line, line in zip(timeline.lines, timeline.lines[1:]):
            match line:
                case InheritedLine() if not is_line_used(beatmap, timeline, line, previous_line):
                    yield self._unused_inherited_line_issue(beatmap, timeline, line, previous_line)

    def _unused_inherited_line_issue(
        self,
        beatmap: Beatmap,
        timeline: Timeline,
        line: InheritedLine,
        previous_line: TimingLine,
    ) -> Issue:
        # Say what the line does change, in case it just applies to nothing.
        changes: list[str] = []
        if sv_differs(line, previous_line) and not can_use_sv(beatmap, timeline, line):
            changes.append("SV")
        if line.samples_differ(previous_line) and not section_contains(
            beatmap, timeline, line, include_bodies=True
        ):
            changes.append("sample settings")
        description = " and ".join(changes) + ", but affects nothing" if changes else "nothing"

        return self.issue(
            "Minor Inherited", beatmap, format_timestamp(line.offset), description, time=line.offset
        )
