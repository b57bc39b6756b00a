"""
Jackknife influence values for BCa confidence intervals.

Computes leave-one-out jackknife influence values used by the BCa
method to estimate the acceleration parameter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyresampling.montecarlo._replicates import evaluate

if TYPE_CHECKING:
    from pyresampling.montecarlo.design import BootstrapDesign
    from pyresampling.montecarlo.solution import BootstrapSolution


def jackknife_values(design: 'BootstrapDesign') -> NDArray:
    """
    Leave-one-out statistics, shape (n, k).

    Row i is the statistic with observation i removed. Index-type
    statistics receive the reduced data with identity indices;
    frequency and weight statistics receive the full data with
    observation i zeroed out. Parametric designs are jackknifed on the
    observed data.
    """
    data = design.data
    statistic = design.statistic
    n = design.n
    rows = []

    for i in range(n):
        keep = np.concatenate([np.arange(i), np.arange(i + 1, n)])

        if design.sim == "parametric":
            args = (data[keep],)
        elif design.stype == "i":
            args = (data[keep], np.arange(n - 1))
        else:
            freqs = np.ones(n, dtype=np.float64)
            freqs[i] = 0.0
            if design.stype == "w":
                freqs = freqs / freqs.sum()
            args = (data, freqs)

        k = len(rows[0]) if rows else None
        rows.append(evaluate(
            statistic, args, stage="jackknife", replicate=i, k=k,
        ))

    return np.vstack(rows)


def jackknife_influence(
    boot_out: 'BootstrapSolution | BootstrapDesign',
    stat_index: int = 0,
) -> NDArray:
    """
    Compute jackknife influence values for a bootstrap statistic.

    Uses the standard delete-1 jackknife:
        L_i = (n-1) * (theta_bar - theta_{-i})

    where theta_{-i} is the statistic computed without observation i
    and theta_bar is the mean of all leave-one-out estimates.

    Args:
        boot_out: Bootstrap solution (or its design) holding the data
            and statistic function.
        stat_index: Which element of the statistic vector to compute
            influence for (0-indexed).

    Returns:
        Influence values, shape (n,). All zeros when n == 1.

    Raises:
        StatisticComputationError: If the statistic fails on a
            leave-one-out sample (replicate holds the left-out row).
    """
    design = getattr(boot_out, "_design", boot_out)

    if design.n < 2:
        return np.zeros(design.n, dtype=np.float64)

    jack = jackknife_values(design)[:, stat_index]
    return (design.n - 1) * (np.mean(jack) - jack)


def acceleration(L: NDArray) -> float | None:
    """
    BCa acceleration a = sum(L^3) / (6 * sum(L^2)^1.5).

    Returns None when every influence value is zero, where the ratio
    is undefined.
    """
    L_sq_sum = float(np.sum(L ** 2))
    if L_sq_sum <= 0.0:
        return None
    return float(np.sum(L ** 3) / (6.0 * L_sq_sum ** 1.5))
