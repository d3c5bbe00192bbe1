"""Timeline resolver - effective timing state at arbitrary timestamps.

Answers which timing lines govern a given time, the slider velocity and
tempo in effect there, and how a time relates to the beat snap grid of its
governing uninherited line.
"""

import math
from bisect import bisect_right
from collections.abc import Sequence

from mapset_timing.models.timing import TimingLine, UninheritedLine, line_sort_key, sv_mult_of

# Supported beat snap divisors, searched in this order.
DIVISORS = (1, 2, 3, 4, 6, 8, 12, 16)

# 1/12 and 1/16 together contain every supported divisor's grid.
PRACTICAL_DIVISORS = (16, 12)


class TimelineError(Exception):
    """Timing data that cannot be resolved at all."""


class EmptyTimelineError(TimelineError):
    """A beatmap without timing lines."""


class Timeline:
    """Read-only view over one beatmap's timing lines."""

    def __init__(self, lines: Sequence[TimingLine], snap_tolerance: float = 1.0) -> None:
        """Initialize the timeline.

        Args:
            lines: Timing lines of one difficulty, in any order.
            snap_tolerance: Distance in ms within which a time counts as
                snapped to a divisor.

        Raises:
            EmptyTimelineError: If there are no timing lines.
        """
        if not lines:
            raise EmptyTimelineError("There are no timing lines.")

        self.lines: list[TimingLine] = sorted(lines, key=line_sort_key)
        self.uninherited_lines: list[UninheritedLine] = [
            line for line in self.lines if isinstance(line, UninheritedLine)
        ]
        self.snap_tolerance = snap_tolerance

        self._offsets = [line.offset for line in self.lines]
        self._uninherited_offsets = [line.offset for line in self.uninherited_lines]

    def get_timing_line(self, time: float) -> TimingLine:
        """Latest line at or before `time`, or the first line if none is."""
        index = bisect_right(self._offsets, time) - 1
        return self.lines[max(index, 0)]

    def get_uninherited_line(self, time: float) -> UninheritedLine:
        """Latest uninherited line at or before `time`, or the first one if none is."""
        if not self.uninherited_lines:
            raise TimelineError("There are no uninherited lines.")

        index = bisect_right(self._uninherited_offsets, time) - 1
        return self.uninherited_lines[max(index, 0)]

    def get_next_timing_line(self, time: float) -> TimingLine | None:
        """First line strictly after `time`."""
        index = bisect_right(self._offsets, time)
        if index >= len(self.lines):
            return None
        return self.lines[index]

    def get_next_uninherited_line(self, time: float) -> UninheritedLine | None:
        """First uninherited line strictly after `time`."""
        index = bisect_right(self._uninherited_offsets, time)
        if index >= len(self.uninherited_lines):
            return None
        return self.uninherited_lines[index]

    def get_sv_mult(self, time: float) -> float:
        """Slider velocity multiplier in effect at `time`."""
        return sv_mult_of(self.get_timing_line(time))

    def get_slider_velocity(self, time: float, base_velocity: float) -> float:
        """Effective slider velocity at `time`."""
        return base_velocity * self.get_sv_mult(time)

    def get_effective_bpm(self, time: float) -> float:
        """BPM scaled by slider velocity.

        Only meaningful for comparing two points in time; inherited lines
        never change the actual tempo.
        """
        return self.get_sv_mult(time) * self.get_uninherited_line(time).bpm

    def get_theoretical_unsnap(self, time: float, divisor: int) -> float:
        """Signed ms from `time` to the nearest 1/`divisor` snap. Positive is late."""
        line = self.get_uninherited_line(time)
        if not line.has_valid_tempo or divisor <= 0 or not math.isfinite(time):
            return 0.0

        beats = (time - line.offset) / line.ms_per_beat
        scaled = beats * divisor
        if not math.isfinite(scaled):
            return 0.0

        snapped_beats = round(scaled) / divisor
        return (beats - snapped_beats) * line.ms_per_beat

    def get_lowest_divisor(self, time: float) -> int:
        """Smallest supported divisor `time` is snapped to, or 0 if unsnapped."""
        line = self.get_uninherited_line(time)
        if not line.has_valid_tempo or not math.isfinite(time - line.offset):
            return 0
        # Too far from the line for the finest grid to be representable.
        if not math.isfinite((time - line.offset) / line.ms_per_beat * DIVISORS[-1]):
            return 0

        for divisor in DIVISORS:
            if abs(self.get_theoretical_unsnap(time, divisor)) < self.snap_tolerance:
                return divisor
        return 0

    def get_practical_unsnap(self, time: float) -> float:
        """Signed ms from `time` to the closest 1/12 or 1/16 snap. Positive is late."""
        unsnaps = [self.get_theoretical_unsnap(time, divisor) for divisor in PRACTICAL_DIVISORS]
        return min(unsnaps, key=abs)
