"""Before line check - objects just missing a slider velocity change."""

from collections.abc import Iterator

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap, HitObject, Mode, Slider
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline


class BeforeLineCheck(Check):
    """Objects snapped a few ms before a line that would change their slider velocity.

    With 1 ms unsnaps common from copy-pasting, a slider head 1 ms before an
    SV change keeps the old velocity. Changes in BPM are accounted for through
    the effective BPM, so lines which would not make a difference are ignored.
    Mania is excluded; SV there changes scroll speed, not object properties.
    """

    message = "Hit object is unaffected by a line very close to it."
    modes = (Mode.STANDARD, Mode.TAIKO, Mode.CATCH)
    templates = {
        "Before": IssueTemplate(
            IssueLevel.WARNING,
            "{} - {} is snapped {} ms before a line which would modify its slider velocity.",
            "A hit object is snapped 5 ms or less behind a timing line which would otherwise "
            "modify its slider velocity. For standard and catch this only looks at slider heads.",
        ),
        "After": IssueTemplate(
            IssueLevel.WARNING,
            "{} - {} is snapped {} ms after a line which would modify its slider velocity.",
            "Same as the other check, except after instead of before. Only applies to taiko.",
        ),
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        return "before_line"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)

        for hit_object in beatmap.hit_objects:
            # SV speeds up every object in taiko, but only sliders in standard and catch.
            if not isinstance(hit_object, Slider) and beatmap.mode != Mode.TAIKO:
                continue

            yield from self._issues_at(beatmap, timeline, hit_object)

    def _issues_at(self, beatmap: Beatmap, timeline: Timeline, hit_object: HitObject) -> Iterator[Issue]:
        time = hit_object.time
        if abs(timeline.get_practical_unsnap(time)) > self.settings.unsnap_minor_ms:
            return

        window = self.settings.before_line_window_ms
        label = hit_object.describe_edge(time)

        next_line = timeline.get_next_timing_line(time)
        if next_line is not None:
            time_diff = next_line.offset - time
            bpm_diff = timeline.get_effective_bpm(time) - timeline.get_effective_bpm(next_line.offset)
            if 0 < time_diff <= window and abs(bpm_diff) > 1:
                yield self.issue("Before", beatmap, format_timestamp(time), label, f"{time_diff:.2f}", time=time)

        if beatmap.mode != Mode.TAIKO:
            return

        # The line governing this object, if it only just came before it.
        line = timeline.get_timing_line(time)
        time_diff = time - line.offset
        if 0 < time_diff <= window:
            bpm_diff = timeline.get_effective_bpm(line.offset - 1) - timeline.get_effective_bpm(time)
            if abs(bpm_diff) > 1:
                yield self.issue("After", beatmap, format_timestamp(time), label, f"{time_diff:.2f}", time=time)
