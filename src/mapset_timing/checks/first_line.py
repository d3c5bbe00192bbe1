"""First line check."""

from collections.abc import Iterator

from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.models.timing import InheritedLine
from mapset_timing.pipeline.base import Check


class FirstLineCheck(Check):
    """First line toggles kiai or is inherited, or there are no lines at all."""

    message = "First line toggles kiai or is inherited."
    templates = {
        "Inherited": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - First timing line is inherited.",
            "The first timing line of a beatmap is inherited.",
        ),
        "Toggles Kiai": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - First timing line toggles kiai.",
            "The first timing line of a beatmap has kiai enabled.",
        ),
        "No Lines": IssueTemplate(
            IssueLevel.PROBLEM,
            "There are no timing lines.",
            "A beatmap has no timing lines.",
        ),
    }

    @property
    def name(self) -> str:
        return "first_line"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        # Works on the raw lines; a timeline cannot be built without any.
        if not beatmap.timing_lines:
            yield self.issue("No Lines", beatmap)
            return

        line = beatmap.timing_lines[0]
        if isinstance(line, InheritedLine):
            yield self.issue("Inherited", beatmap, format_timestamp(line.offset), time=line.offset)
        elif line.kiai:
            yield self.issue("Toggles Kiai", beatmap, format_timestamp(line.offset), time=line.offset)
