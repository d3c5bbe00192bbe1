"""Snap consistency check - rhythms interpreted differently across difficulties.

A difficulty's edges are compared with those of every harder difficulty of the
same mode. Lower difficulties are expected to simplify rhythms, so an edge that
has no counterpart in a harder difficulty, while the harder one has an edge
close enough to be mistaken for it, likely means one of the two is snapped
wrong. This is intentionally heavy on false positives.
"""

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from mapset_timing.config import Settings
from mapset_timing.models.beatmap import Beatmap
from mapset_timing.models.issues import Issue, IssueLevel, IssueTemplate, format_timestamp
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.pipeline.base import Check
from mapset_timing.timeline import Timeline, TimelineError

logger = logging.getLogger(__name__)

# Divisors stepped through when estimating how far apart two confusable
# snappings can be.
RANGE_DIVISORS = (1, 2, 3, 4, 5, 6, 7, 8, 9, 12, 16)


@dataclass(frozen=True)
class Inconsistency:
    """An edge with no counterpart in a harder difficulty, which has a close edge instead."""

    inconsistent_time: float  # in the checked difficulty
    respective_time: float  # in the harder difficulty
    respective_beatmap: Beatmap


def get_missing_edge_times(
    edge_times: np.ndarray,
    other_edge_times: np.ndarray,
    match_ms: float,
) -> np.ndarray:
    """Edge times with no edge in `other_edge_times` closer than `match_ms`.

    Both arrays must be sorted.
    """
    if other_edge_times.size == 0:
        return edge_times.copy()

    last = other_edge_times.size - 1
    indices = np.searchsorted(other_edge_times, edge_times)
    before = other_edge_times[np.clip(indices - 1, 0, last)]
    after = other_edge_times[np.clip(indices, 0, last)]
    nearest = np.minimum(np.abs(edge_times - before), np.abs(edge_times - after))
    return edge_times[nearest >= match_ms]


def get_single_range(timeline: Timeline, time: float, ms_per_beat: float, margin: float) -> float:
    """How far off a time on its divisor can be while still confusable with it.

    Larger for smaller divisors, so a 1/1 gets a wider range than a 1/6.
    """
    divisor = max(timeline.get_lowest_divisor(time), 2)
    index = RANGE_DIVISORS.index(divisor)
    greater_divisor = RANGE_DIVISORS[min(index + 2, len(RANGE_DIVISORS) - 1)]
    return ms_per_beat / greater_divisor - margin


def get_consistency_range(
    timeline: Timeline,
    time: float,
    other_time: float,
    ms_per_beat: float,
    margin: float,
) -> float:
    """Range around `other_time` within which `time` counts as inconsistent.

    Args:
        timeline: Timeline of the harder difficulty.
        time: Edge time of the easier difficulty.
        other_time: Edge time of the harder difficulty.
        ms_per_beat: Beat length at `time`.
        margin: Unsnap margin in ms.
    """
    divisor = max(timeline.get_lowest_divisor(time), 2)
    higher_diff_divisor = max(timeline.get_lowest_divisor(other_time), 2)

    # Higher snaps in the harder difficulty are normal progression, unless
    # going from something like 1/4 to 1/3.
    if divisor < higher_diff_divisor or divisor % 3 != 0 and higher_diff_divisor % 3 == 0:
        return max(
            get_single_range(timeline, time, ms_per_beat, margin),
            get_single_range(timeline, other_time, ms_per_beat, margin),
        )

    return margin


def find_inconsistencies(
    edge_times: np.ndarray,
    other_beatmap: Beatmap,
    other_timeline: Timeline,
    other_edge_times: np.ndarray,
    settings: Settings,
) -> list[Inconsistency]:
    """Compare one difficulty's edges against a single harder difficulty."""
    match_ms = settings.edge_match_ms
    missing = get_missing_edge_times(edge_times, other_edge_times, match_ms)
    other_missing = get_missing_edge_times(other_edge_times, edge_times, match_ms)

    inconsistencies: list[Inconsistency] = []
    if missing.size == 0 or other_missing.size == 0:
        return inconsistencies

    for missing_time in missing:
        line = other_timeline.get_uninherited_line(float(missing_time))
        if not line.has_valid_tempo:
            continue
        ms_per_beat = line.ms_per_beat

        # Edges a beat apart or more are unrelated.
        start = np.searchsorted(other_missing, missing_time - ms_per_beat, side="right")
        end = np.searchsorted(other_missing, missing_time + ms_per_beat, side="left")
        for other_missing_time in other_missing[start:end]:
            # Both claiming an edge the other lacks at the same time is not a snapping issue.
            if abs(missing_time - other_missing_time) <= match_ms:
                continue

            consistency_range = get_consistency_range(
                other_timeline,
                float(missing_time),
                float(other_missing_time),
                ms_per_beat,
                settings.consistency_margin_ms,
            )
            if abs(missing_time - other_missing_time) < consistency_range:
                inconsistencies.append(
                    Inconsistency(float(missing_time), float(other_missing_time), other_beatmap)
                )

    return inconsistencies


class SnapConsistencyCheck(Check):
    """Edges snapped differently from a close edge in a harder difficulty."""

    message = "Inconsistently snapped hit objects."
    templates = {
        "Snap Consistency": IssueTemplate(
            IssueLevel.WARNING,
            "{} (1/{}) Different snapping, {} (1/{}), is used in {}.",
            "Two hit objects in separate difficulties do not have any object in the other "
            "difficulty at the same time, and are close enough in time to be mistaken for "
            "one another.",
        ),
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def name(self) -> str:
        return "snap_consistency"

    def get_issues(self, context: CheckContext, beatmap: Beatmap) -> Iterator[Issue]:
        timeline = context.timeline(beatmap)
        edge_times = np.array(beatmap.edge_times(), dtype=float)

        others: list[tuple[Beatmap, Timeline]] = []
        for other in context.beatmap_set.beatmaps:
            if other.star_rating <= beatmap.star_rating or other.mode != beatmap.mode:
                continue
            try:
                other_timeline = context.timeline(other)
                other_timeline.get_uninherited_line(0)
            except TimelineError as e:
                # Reported by that difficulty's own pass.
                logger.debug("Skipping %s when comparing with %s: %s", other, beatmap, e)
                continue
            others.append((other, other_timeline))
        others.sort(key=lambda pair: pair[0].star_rating)

        if not others:
            return

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            results = list(
                executor.map(
                    lambda pair: find_inconsistencies(
                        edge_times,
                        pair[0],
                        pair[1],
                        np.array(pair[0].edge_times(), dtype=float),
                        self.settings,
                    ),
                    others,
                )
            )

        # First match per edge wins.
        by_time: dict[float, Inconsistency] = {}
        for inconsistencies in results:
            for inconsistency in inconsistencies:
                by_time.setdefault(inconsistency.inconsistent_time, inconsistency)

        for time in sorted(by_time):
            inconsistency = by_time[time]
            respective_divisor = timeline.get_lowest_divisor(inconsistency.respective_time)
            inconsistent_divisor = timeline.get_lowest_divisor(inconsistency.inconsistent_time)

            # Unsnapped edges are left to the unsnap check.
            if respective_divisor == 0 or inconsistent_divisor == 0:
                continue

            yield self.issue(
                "Snap Consistency",
                beatmap,
                format_timestamp(inconsistency.respective_time),
                respective_divisor,
                format_timestamp(inconsistency.inconsistent_time),
                inconsistent_divisor,
                inconsistency.respective_beatmap,
                time=inconsistency.inconsistent_time,
            )
