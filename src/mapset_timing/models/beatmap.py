"""Beatmap data models.

These models hold already-parsed beatmap data. They are built once per
difficulty and treated as read-only during analysis.
"""

from dataclasses import dataclass, field
from enum import Enum

from mapset_timing.models.timing import TimingLine, line_sort_key


class Mode(Enum):
    """Game mode (ruleset) a difficulty is made for."""

    STANDARD = "standard"
    TAIKO = "taiko"
    CATCH = "catch"
    MANIA = "mania"


@dataclass
class HitObject:
    """Base hit object. Only its clickable timestamps matter here."""

    time: float  # ms
    end_time: float | None = None  # ms, None for objects without a body

    def __post_init__(self) -> None:
        if self.end_time is None or self.end_time < self.time:
            self.end_time = self.time

    @property
    def type_name(self) -> str:
        return "Hit object"

    def edge_times(self) -> list[float]:
        """Timestamps the player can distinguish (head, repeats, tail)."""
        return [self.time]

    def describe_edge(self, edge_time: float) -> str:
        """Describe which part of the object is at `edge_time`."""
        if edge_time == self.time:
            return f"{self.type_name} head"
        if edge_time == self.end_time:
            return f"{self.type_name} tail"
        return f"{self.type_name} repeat"


@dataclass
class Circle(HitObject):
    @property
    def type_name(self) -> str:
        return "Circle"

    def describe_edge(self, edge_time: float) -> str:
        return self.type_name


@dataclass
class Slider(HitObject):
    """A slider; `slides` is 1 for no repeats, 2 for one repeat, and so on."""

    slides: int = 1

    @property
    def type_name(self) -> str:
        return "Slider"

    def edge_times(self) -> list[float]:
        slides = max(self.slides, 1)
        slide_duration = (self.end_time - self.time) / slides
        return [self.time + i * slide_duration for i in range(slides)] + [self.end_time]


@dataclass
class Spinner(HitObject):
    @property
    def type_name(self) -> str:
        return "Spinner"

    def edge_times(self) -> list[float]:
        return [self.time, self.end_time]


@dataclass
class HoldNote(HitObject):
    @property
    def type_name(self) -> str:
        return "Hold note"

    def edge_times(self) -> list[float]:
        return [self.time, self.end_time]


@dataclass
class Beatmap:
    """A single difficulty of a beatmap set."""

    version: str  # difficulty name
    mode: Mode = Mode.STANDARD
    star_rating: float = 0.0
    timing_lines: list[TimingLine] = field(default_factory=list)
    hit_objects: list[HitObject] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.timing_lines = sorted(self.timing_lines, key=line_sort_key)
        self.hit_objects = sorted(self.hit_objects, key=lambda hit_object: hit_object.time)

    def __str__(self) -> str:
        return self.version

    def edge_times(self) -> list[float]:
        """All hit object edge times, sorted."""
        return sorted(
            edge_time
            for hit_object in self.hit_objects
            for edge_time in hit_object.edge_times()
        )

    def objects_between(
        self,
        start: float,
        end: float,
        kind: type[HitObject] = HitObject,
        include_bodies: bool = False,
    ) -> list[HitObject]:
        """Hit objects of `kind` starting in [start, end).

        With `include_bodies`, objects whose body overlaps the range count too.
        """
        return [
            hit_object
            for hit_object in self.hit_objects
            if isinstance(hit_object, kind)
            and hit_object.time < end
            and (hit_object.time >= start or include_bodies and hit_object.end_time >= start)
        ]


@dataclass
class BeatmapSet:
    """All difficulties of one song."""

    title: str = ""
    beatmaps: list[Beatmap] = field(default_factory=list)
