"""Pytest fixtures for Mapset Timing tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from mapset_timing.config import Settings, configure
from mapset_timing.models.beatmap import Beatmap, BeatmapSet, HitObject, Mode
from mapset_timing.models.pipeline import CheckContext
from mapset_timing.models.timing import TimingLine, UninheritedLine


@pytest.fixture(autouse=True)
def default_settings() -> Iterator[Settings]:
    """Reset the global settings so CLI overrides do not leak between tests."""
    yield configure()
    configure()


@pytest.fixture
def settings() -> Settings:
    """Return settings with default thresholds."""
    return Settings()


@pytest.fixture
def red_line() -> UninheritedLine:
    """Return a 120 BPM, 4/4 uninherited line at 0 ms."""
    return UninheritedLine(offset=0, ms_per_beat=500, meter=4)


@pytest.fixture
def make_beatmap(red_line: UninheritedLine) -> Callable[..., Beatmap]:
    """Return a factory for beatmaps, timed at 120 BPM unless lines are given."""

    def _make_beatmap(
        hit_objects: list[HitObject] | None = None,
        timing_lines: list[TimingLine] | None = None,
        version: str = "Normal",
        mode: Mode = Mode.STANDARD,
        star_rating: float = 2.0,
    ) -> Beatmap:
        return Beatmap(
            version=version,
            mode=mode,
            star_rating=star_rating,
            timing_lines=[red_line] if timing_lines is None else timing_lines,
            hit_objects=hit_objects or [],
        )

    return _make_beatmap


@pytest.fixture
def make_context(settings: Settings) -> Callable[..., CheckContext]:
    """Return a factory for check contexts over the given beatmaps."""

    def _make_context(*beatmaps: Beatmap) -> CheckContext:
        return CheckContext(beatmap_set=BeatmapSet(title="Test", beatmaps=list(beatmaps)), settings=settings)

    return _make_context


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Return a temporary output directory."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir
