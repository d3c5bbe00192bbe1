"""Command line interface for Mapset Timing."""
