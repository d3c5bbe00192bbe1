"""Kiai unsnap check."""

from collections.abc import Iterator

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.pipeline.base import Check


class KiaiUnsnapCheck(Check):
    """Kiai starting notably off the beat.

    Kiai is visual, so it needs less precision than hit sounds, but it
    should still start on a distinct sound.
    """

    message = "Unsnapped kiai."
    templates = {
        "Warning": IssueTemplate(
            IssueLevel.WARNING,
            "{} - Kiai is unsnapped by {} ms.",
            "A line enabling kiai is unsnapped by 10 ms or more.",
        ),
        "Minor": IssueTemplate(
            IssueLevel.MINOR,
            "{} - Kiai is unsnapped by {} ms.",
            "Same as the other check, but by 1 ms or more instead.",
        ),
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        return "kiai_unsnap"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)

        kiai = False
        for line in timeline.lines:
            starts_kiai = line.kiai and not kiai
            kiai = line.kiai
            if not starts_kiai:
                continue

            unsnap = timeline.get_practical_unsnap(line.offset)
            if abs(unsnap) >= self.settings.kiai_unsnap_warning_ms:
                template = "Warning"
            elif abs(unsnap) >= self.settings.kiai_unsnap_minor_ms:
                template = "Minor"
            else:
                continue

            yield self.issue(template, beatmap, format_timestamp(line.offset), round(unsnap, 3), time=line.offset)
