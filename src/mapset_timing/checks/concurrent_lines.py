"""Concurrent lines check - timing lines sharing an offset."""

from collections.abc import Iterator

from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.models.timing import InheritedLine, TimingLine, UninheritedLine
from mapset_timing.pipeline.base import Check


def conflicting_settings(green_line: TimingLine, red_line: TimingLine) -> tuple[list[str], list[str]]:
    """Describe the kiai and sample settings in which two lines differ."""
    green: list[str] = []
    red: list[str] = []
    if green_line.kiai != red_line.kiai:
        green.append("kiai" if green_line.kiai else "no kiai")
        red.append("kiai" if red_line.kiai else "no kiai")
    if green_line.volume != red_line.volume:
        green.append(f"{green_line.volume}% volume")
        red.append(f"{red_line.volume}% volume")
    if green_line.sampleset != red_line.sampleset:
        green.append(f"{green_line.sampleset} sampleset")
        red.append(f"{red_line.sampleset} sampleset")
    if green_line.custom_index != red_line.custom_index:
        green.append(f"custom {green_line.custom_index}")
        red.append(f"custom {red_line.custom_index}")
    return green, red


class ConcurrentLinesCheck(Check):
    """Two lines of one kind at the same time, or a red and green line that disagree.

    Lines of the same kind at one offset may swap order when the beatmap is
    loaded again. A red and a green line at one offset are fine, the green
    line always applies its settings last.
    """

    message = "Concurrent or conflicting timing lines."
    templates = {
        "Concurrent": IssueTemplate(
            IssueLevel.PROBLEM,
            "{} - Concurrent {} lines.",
            "Two inherited or uninherited timing lines exist at the same point in time.",
        ),
        "Conflicting": IssueTemplate(
            IssueLevel.MINOR,
            "{} - Conflicting line settings. Green: {}. Red: {}. Green overrides red.",
            "An inherited and uninherited timing line exist at the same point in time and "
            "have different settings.",
        ),
    }

    @property
    def name(self) -> str:
        return "concurrent_lines"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        lines = beatmap.timing_lines
        for previous_line, line in zip(lines, lines[1:]):
            if previous_line.offset != line.offset:
                continue

            match (previous_line, line):
                case (UninheritedLine(), UninheritedLine()):
                    yield self.issue(
                        "Concurrent", beatmap, format_timestamp(line.offset), "uninherited", time=line.offset
                    )
                case (InheritedLine(), InheritedLine()):
                    yield self.issue(
                        "Concurrent", beatmap, format_timestamp(line.offset), "inherited", time=line.offset
                    )
                case (UninheritedLine() as red_line, InheritedLine() as green_line):
                    green, red = conflicting_settings(green_line, red_line)
                    if green:
                        yield self.issue(
                            "Conflicting",
                            beatmap,
                            format_timestamp(line.offset),
                            ", ".join(green),
                            ", ".join(red),
                            time=line.offset,
                        )
