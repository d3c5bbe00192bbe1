"""Timing line models.

A beatmap's timing is a sorted sequence of uninherited ("red") lines, which
set tempo and meter, and inherited ("green") lines, which only scale slider
velocity and change sample, volume or kiai settings.
"""

import math
from dataclasses import dataclass
from enum import Enum


class Sampleset(Enum):
    """Hit sound sample bank selected by a timing line."""

    AUTO = "auto"
    NORMAL = "normal"
    SOFT = "soft"
    DRUM = "drum"

    def __str__(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class TimingLine:
    """Settings shared by both kinds of timing line."""

    offset: float  # ms
    kiai: bool = False
    volume: int = 100  # 0-100
    sampleset: Sampleset = Sampleset.NORMAL
    custom_index: int = 0

    def samples_differ(self, other: "TimingLine") -> bool:
        """Whether volume, sampleset or custom index differ from `other`."""
        return (
            self.sampleset != other.sampleset
            or self.custom_index != other.custom_index
            or self.volume != other.volume
        )


@dataclass(frozen=True)
class UninheritedLine(TimingLine):
    """A red line: starts a new timing section with its own tempo and meter."""

    ms_per_beat: float = 500.0
    meter: int = 4
    omits_bar_line: bool = False

    @property
    def uninherited(self) -> bool:
        return True

    @property
    def sv_mult(self) -> float:
        # Red lines reset slider velocity.
        return 1.0

    @property
    def has_valid_tempo(self) -> bool:
        return math.isfinite(self.ms_per_beat) and self.ms_per_beat > 0

    @property
    def bpm(self) -> float:
        if not self.has_valid_tempo:
            return 0.0
        return 60000.0 / self.ms_per_beat


@dataclass(frozen=True)
class InheritedLine(TimingLine):
    """A green line: inherits tempo, scales slider velocity."""

    sv_mult: float = 1.0  # relative to the governing red line

    @property
    def uninherited(self) -> bool:
        return False


def line_sort_key(line: TimingLine) -> tuple[float, int]:
    """Sort by offset; at equal offsets the uninherited line comes first.

    Lines at the same offset then resolve so that the red line governs tempo
    while the green line, being latest, governs slider velocity, samples and
    kiai.
    """
    match line:
        case UninheritedLine():
            return (line.offset, 0)
        case _:
            return (line.offset, 1)


def sv_mult_of(line: TimingLine) -> float:
    """Slider velocity multiplier a line sets; 1.0 for anything but an inherited line."""
    match line:
        case InheritedLine(sv_mult=sv_mult):
            return sv_mult
        case _:
            return 1.0
