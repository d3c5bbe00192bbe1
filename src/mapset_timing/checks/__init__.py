"""Timing checks."""

from mapset_timing.checks.before_line import BeforeLineCheck
from mapset_timing.checks.concurrent_lines import ConcurrentLinesCheck
from mapset_timing.checks.first_line import FirstLineCheck
from mapset_timing.checks.inconsistent_lines import InconsistentLinesCheck
from mapset_timing.checks.kiai_unsnap import KiaiUnsnapCheck
from mapset_timing.checks.rare_divisors import RareDivisorCheck
from mapset_timing.checks.snap_consistency import SnapConsistencyCheck
from mapset_timing.checks.unsnaps import UnsnapCheck
from mapset_timing.checks.unused_lines import UnusedLinesCheck

__all__ = [
    "BeforeLineCheck",
    "ConcurrentLinesCheck",
    "FirstLineCheck",
    "InconsistentLinesCheck",
    "KiaiUnsnapCheck",
    "RareDivisorCheck",
    "SnapConsistencyCheck",
    "UnsnapCheck",
    "UnusedLinesCheck",
]
