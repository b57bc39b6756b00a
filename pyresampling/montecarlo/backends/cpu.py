"""
CPU backends for bootstrap and permutation test.

CPUBootstrapBackend: Ordinary, balanced, and parametric bootstrap.
CPUPermutationBackend: Permutation test with direct two-sided counting.

Both consume a single numpy Generator sequentially, so a seed fully
determines the replicate set.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyresampling.core.result import Result
from pyresampling.core.compute.timing import Timer
from pyresampling.core.compute.tolerances import PVALUE_RTOL
from pyresampling.core.exceptions import ValidationError
from pyresampling.montecarlo._common import BootParams, PermutationParams
from pyresampling.montecarlo._replicates import (
    balanced_indices,
    evaluate,
    fill_bootstrap,
    fill_permutations,
    observed_statistic,
    strata_groups,
)
from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign


def summarize_replicates(
    t0: NDArray,
    t: NDArray,
) -> tuple[NDArray, NDArray]:
    """Bootstrap bias (mean(t) - t0) and standard error (sd(t))."""
    bias = np.mean(t, axis=0) - t0
    if t.shape[0] > 1:
        se = np.std(t, axis=0, ddof=1)
    else:
        se = np.zeros_like(t0)
    return bias, se


def count_extreme(
    observed: float,
    perm_stats: NDArray,
    alternative: str,
) -> int:
    """
    Number of permuted statistics at least as extreme as observed.

    two.sided compares absolute values directly; the null distribution
    is not assumed symmetric.
    """
    tol = PVALUE_RTOL * abs(observed)
    if alternative == "two.sided":
        return int(np.sum(np.abs(perm_stats) >= abs(observed) - tol))
    if alternative == "greater":
        return int(np.sum(perm_stats >= observed - tol))
    if alternative == "less":
        return int(np.sum(perm_stats <= observed + tol))
    raise ValidationError(f"Unknown alternative: {alternative!r}")


def permutation_p_value(count: int, R: int) -> tuple[float, bool, float]:
    """
    (p_value, is_bound, phipson_smyth) for `count` extremes out of R.

    With no extreme permutation the test cannot resolve anything finer
    than 1/R, so 1/R is reported as an upper bound.
    """
    corrected = float(count + 1) / float(R + 1)
    if count == 0:
        return 1.0 / R, True, corrected
    return float(count) / float(R), False, corrected


class CPUBootstrapBackend:
    """
    CPU backend for bootstrap resampling.

    Supports ordinary, balanced, and parametric simulation types,
    optionally stratified.
    """

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[BootParams]:
        """Run bootstrap and return Result[BootParams]."""
        timer = Timer()
        timer.start()

        rng = np.random.default_rng(design.seed)

        with timer.section('t0_computation'):
            t0 = observed_statistic(design)

        k = len(t0)
        t = np.empty((design.R, k), dtype=np.float64)

        with timer.section('bootstrap_replicates'):
            groups = strata_groups(design.strata)
            index_matrix = None
            if design.sim == "balanced":
                index_matrix = balanced_indices(design.n, design.R, rng, groups)
            fill_bootstrap(
                design, t, 0, design.R, rng,
                groups=groups, index_matrix=index_matrix,
            )

        with timer.section('summary_statistics'):
            bias, se = summarize_replicates(t0, t)

        timer.stop()

        return Result(
            params=BootParams(t0=t0, t=t, R=design.R, bias=bias, se=se),
            info={
                'sim': design.sim,
                'stype': design.stype,
                'n': design.n,
                'k': k,
                'stratified': design.strata is not None,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class CPUPermutationBackend:
    """
    CPU backend for permutation testing.

    Shuffles the pooled data and recomputes the statistic R times.
    p-value = count / R, reported as the bound 1/R when count is 0.
    """

    @property
    def name(self) -> str:
        return 'cpu_permutation'

    def solve(self, design: PermutationDesign) -> Result[PermutationParams]:
        """Run permutation test and return Result[PermutationParams]."""
        timer = Timer()
        timer.start()

        rng = np.random.default_rng(design.seed)

        with timer.section('observed_stat'):
            observed = float(evaluate(
                design.statistic, (design.x, design.y),
                stage="t0", k=1,
            )[0])

        with timer.section('permutation_replicates'):
            combined = np.concatenate([design.x, design.y])
            perm_stats = np.empty(design.R, dtype=np.float64)
            fill_permutations(design, combined, perm_stats, 0, design.R, rng)

        with timer.section('p_value'):
            count = count_extreme(observed, perm_stats, design.alternative)
            p_value, is_bound, corrected = permutation_p_value(count, design.R)

        timer.stop()

        return Result(
            params=PermutationParams(
                observed_stat=observed,
                perm_stats=perm_stats,
                count=count,
                p_value=p_value,
                p_value_is_bound=is_bound,
                p_value_corrected=corrected,
                R=design.R,
                alternative=design.alternative,
            ),
            info={
                'n1': design.n1,
                'n2': design.n2,
                'alternative': design.alternative,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
