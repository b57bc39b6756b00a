"""
Compute infrastructure shared by resampling backends.

Modules:
    timing: Accumulating section timer
    tolerances: Degeneracy thresholds, tolerance tiers, chunk sizes
"""

from pyresampling.core.compute.timing import Timer
from pyresampling.core.compute.tolerances import (
    ToleranceTier,
    CPU_FP64,
    MONTE_CARLO,
    DEGENERATE_SPREAD_RTOL,
    PVALUE_RTOL,
    BCA_DENOMINATOR_ATOL,
    DEFAULT_CHUNK_SIZE,
)

__all__ = [
    "Timer",
    "ToleranceTier",
    "CPU_FP64",
    "MONTE_CARLO",
    "DEGENERATE_SPREAD_RTOL",
    "PVALUE_RTOL",
    "BCA_DENOMINATOR_ATOL",
    "DEFAULT_CHUNK_SIZE",
]
