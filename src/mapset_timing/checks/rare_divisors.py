"""Rare divisor check - beat snap divisors used only a handful of times."""

from collections.abc import Iterator

import numpy as np

from mapset_timing.checks.unsnaps import is_unsnap_problem
from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline

# Most severe first; count before percent within the same severity.
BUCKETS = ("Snap Count", "Snap Percent", "Minor Snap Count", "Minor Snap Percent")


def count_divisors(timeline: Timeline, edge_times: list[float]) -> dict[int, int]:
    """Number of edge times snapped to each divisor, ignoring unsnapped ones."""
    divisors = np.array([timeline.get_lowest_divisor(time) for time in edge_times], dtype=int)
    divisors = divisors[divisors != 0]
    values, counts = np.unique(divisors, return_counts=True)
    return {int(value): int(count) for value, count in zip(values, counts)}


def classify_divisors(
    divisor_counts: dict[int, int],
    settings: Settings,
    floor: int = 1,
) -> dict[int, str]:
    """Map each rare divisor to the single bucket it falls into.

    Args:
        divisor_counts: Usage count per divisor.
        settings: Thresholds for the buckets.
        floor: Divisors below this are never considered rare.
    """
    total = sum(divisor_counts.values())
    buckets: dict[int, str] = {}
    for divisor, count in divisor_counts.items():
        if divisor < floor:
            continue

        share = count / total
        if count <= settings.rare_count_warning:
            buckets[divisor] = "Snap Count"
        elif share < settings.rare_percent_warning:
            buckets[divisor] = "Snap Percent"
        elif count <= settings.rare_count_minor:
            buckets[divisor] = "Minor Snap Count"
        elif share < settings.rare_percent_minor:
            buckets[divisor] = "Minor Snap Percent"
    return buckets


class RareDivisorCheck(Check):
    """Divisors that make out very few of a difficulty's snappings."""

    message = "Rarely used beat snap divisors."

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        percent_warning = f"{settings.rare_percent_warning * 100:g}"
        percent_minor = f"{settings.rare_percent_minor * 100:g}"
        self.templates = {
            "Snap Count": IssueTemplate(
                IssueLevel.WARNING,
                f"{{}} - 1/{{}} is used {settings.rare_count_warning} times or less, "
                "ensure this makes sense.",
                "The beat snap divisor a hit object is on is used this few times in the same difficulty.",
            ),
            "Snap Percent": IssueTemplate(
                IssueLevel.WARNING,
                f"{{}} - 1/{{}} makes out {percent_warning}% or less of snappings, "
                "ensure this makes sense.",
                "The beat snap divisor a hit object is on makes out this small a share of all "
                "snappings in the same difficulty.",
            ),
            "Minor Snap Count": IssueTemplate(
                IssueLevel.MINOR,
                f"{{}} - 1/{{}} is used {settings.rare_count_minor} times or less, "
                "ensure this makes sense.",
                "Same as the other count check, with a higher threshold.",
            ),
            "Minor Snap Percent": IssueTemplate(
                IssueLevel.MINOR,
                f"{{}} - 1/{{}} makes out {percent_minor}% or less of snappings, "
                "ensure this makes sense.",
                "Same as the other percent check, with a higher threshold.",
            ),
        }

    @property
    def name(self) -> str:
        return "rare_divisors"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)
        edge_times = beatmap.edge_times()

        floor = self.settings.rare_divisor_floor.get(beatmap.mode.value, 1)
        buckets = classify_divisors(count_divisors(timeline, edge_times), self.settings, floor)
        if not buckets:
            return

        # bucket -> divisor -> timestamps, in time order
        stamps: dict[str, dict[int, list[str]]] = {bucket: {} for bucket in BUCKETS}
        first_times: dict[tuple[str, int], float] = {}
        for time in edge_times:
            # Unsnapped edges are reported by the unsnap check instead.
            if is_unsnap_problem(timeline, time, self.settings):
                continue

            divisor = timeline.get_lowest_divisor(time)
            bucket = buckets.get(divisor)
            if bucket is None:
                continue

            divisor_stamps = stamps[bucket].setdefault(divisor, [])
            stamp = format_timestamp(time)
            if stamp not in divisor_stamps:
                divisor_stamps.append(stamp)
            first_times.setdefault((bucket, divisor), time)

        for bucket in BUCKETS:
            for divisor, divisor_stamps in stamps[bucket].items():
                yield self.issue(
                    bucket,
                    beatmap,
                    " ".join(divisor_stamps),
                    divisor,
                    time=first_times[(bucket, divisor)],
                )
