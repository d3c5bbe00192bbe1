"""Load beatmap sets from their JSON representation.

The document holds already-parsed beatmap data:

    {
      "title": "...",
      "beatmaps": [
        {
          "version": "Insane",
          "mode": "standard",
          "star_rating": 4.2,
          "timing_lines": [
            {"offset": 0, "uninherited": true, "ms_per_beat": 500, "meter": 4},
            {"offset": 1000, "uninherited": false, "sv_mult": 1.5, "kiai": true}
          ],
          "hit_objects": [
            {"type": "circle", "time": 0},
            {"type": "slider", "time": 500, "end_time": 1000, "slides": 2}
          ]
        }
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any

from mapset_timing.models.beatmap import (
    Beatmap,
    BeatmapSet,
    Circle,
    HitObject,
    HoldNote,
    Mode,
    Slider,
    Spinner,
)
from mapset_timing.models.timing import InheritedLine, Sampleset, TimingLine, UninheritedLine

logger = logging.getLogger(__name__)

HIT_OBJECT_TYPES: dict[str, type[HitObject]] = {
    "circle": Circle,
    "slider": Slider,
    "spinner": Spinner,
    "hold": HoldNote,
}


class BeatmapLoadError(Exception):
    """A beatmap set document that cannot be turned into models."""


def load_beatmap_set(path: Path) -> BeatmapSet:
    """Read a beatmap set from a JSON file.

    Raises:
        BeatmapLoadError: If the file is unreadable or malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise BeatmapLoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BeatmapLoadError(f"Invalid JSON in {path}: {e}") from e

    beatmap_set = beatmap_set_from_dict(data)
    logger.debug("Loaded %d beatmaps from %s", len(beatmap_set.beatmaps), path)
    return beatmap_set


def beatmap_set_from_dict(data: Any) -> BeatmapSet:
    """Build a beatmap set from decoded JSON."""
    if not isinstance(data, dict):
        raise BeatmapLoadError("Expected an object at the top level")

    beatmaps = data.get("beatmaps")
    if not isinstance(beatmaps, list):
        raise BeatmapLoadError('"beatmaps" must be a list')

    return BeatmapSet(
        title=str(data.get("title", "")),
        beatmaps=[_beatmap(entry, index) for index, entry in enumerate(beatmaps)],
    )


def _beatmap(data: Any, index: int) -> Beatmap:
    if not isinstance(data, dict):
        raise BeatmapLoadError(f"Beatmap {index} must be an object")

    version = str(data.get("version", f"Beatmap {index}"))
    try:
        mode = Mode(data.get("mode", Mode.STANDARD.value))
    except ValueError as e:
        raise BeatmapLoadError(f"{version}: unknown mode {data.get('mode')!r}") from e

    try:
        return Beatmap(
            version=version,
            mode=mode,
            star_rating=float(data.get("star_rating", 0.0)),
            timing_lines=[_timing_line(line) for line in data.get("timing_lines", [])],
            hit_objects=[_hit_object(hit_object) for hit_object in data.get("hit_objects", [])],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise BeatmapLoadError(f"{version}: {e}") from e


def _timing_line(data: dict[str, Any]) -> TimingLine:
    common = {
        "offset": float(data["offset"]),
        "kiai": bool(data.get("kiai", False)),
        "volume": int(data.get("volume", 100)),
        "sampleset": Sampleset(data.get("sampleset", Sampleset.NORMAL.value)),
        "custom_index": int(data.get("custom_index", 0)),
    }
    if data.get("uninherited", True):
        return UninheritedLine(
            **common,
            ms_per_beat=float(data.get("ms_per_beat", 500.0)),
            meter=int(data.get("meter", 4)),
            omits_bar_line=bool(data.get("omits_bar_line", False)),
        )
    return InheritedLine(**common, sv_mult=float(data.get("sv_mult", 1.0)))


def _hit_object(data: dict[str, Any]) -> HitObject:
    kind = data.get("type", "circle")
    if kind not in HIT_OBJECT_TYPES:
        raise ValueError(f"unknown hit object type {kind!r}")

    time = float(data["time"])
    end_time = data.get("end_time")
    end_time = float(end_time) if end_time is not None else None

    if kind == "circle":
        return Circle(time)
    if kind == "slider":
        return Slider(time, end_time, slides=int(data.get("slides", 1)))
    return HIT_OBJECT_TYPES[kind](time, end_time)
