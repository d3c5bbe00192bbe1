"""Check pipeline for Mapset Timing."""

from mapset_timing.pipeline.base import Check
from mapset_timing.pipeline.orchestrator import Verifier, create_default_verifier

__all__ = ["Check", "Verifier", "create_default_verifier"]
