"""
Numerical tolerances and tuning constants.

Single home for the thresholds that decide when a replicate set is
degenerate, when a permuted statistic ties the observed one, and how
replicates are chunked for the threaded backends.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Relative and absolute tolerance pair for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Closed-form references (formula checks, exact quantiles)
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision, deterministic formulas',
)

# Monte Carlo estimates compared against their analytical targets
MONTE_CARLO = ToleranceTier(
    rtol=0.15,
    atol=0.05,
    name='monte_carlo',
    description='Sampling error of a few thousand replicates',
)

# Replicate columns whose peak-to-peak spread is at or below this fraction
# of their largest magnitude are treated as constant. Relative, so
# statistics on any measurement scale are judged alike.
DEGENERATE_SPREAD_RTOL = 1e-12

# |T*| >= |T| is evaluated as |T*| >= |T| * (1 - PVALUE_RTOL) so that
# permutations reproducing the observed split count as ties.
PVALUE_RTOL = 1e-7

# BCa adjusted-level denominator 1 - a*(z0 + z_alpha) below this is
# treated as zero.
BCA_DENOMINATOR_ATOL = 1e-15

# Replicates per chunk for the threaded backends. Chunk boundaries
# depend only on R and this value, which keeps seeded results
# independent of the worker count.
DEFAULT_CHUNK_SIZE = 256
