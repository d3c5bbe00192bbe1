"""Mapset Timing - timing and snapping analysis for rhythm game beatmap sets."""

__version__ = "0.1.0"
