"""
Common data structures for Monte Carlo methods.

BootParams and PermutationParams are the parameter payloads
wrapped by Result[P] and exposed through Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


# Option vocabularies, validated in design.py and dispatched on in backends
SIM_TYPES = ("ordinary", "balanced", "parametric")
STYPES = ("i", "f", "w")
ALTERNATIVES = ("two.sided", "less", "greater")
CI_TYPES = ("normal", "basic", "perc", "bca", "stud")


@dataclass(frozen=True)
class BootParams:
    """
    Parameter payload for bootstrap results.

    Matches R's boot object structure:
    - t0: observed statistic(s) on original data
    - t: matrix of bootstrap replicates (R rows, k columns)
    - bias: mean(t) - t0
    - se: sd(t)
    - ci: confidence intervals (populated by boot_ci)
    """
    t0: NDArray[np.floating[Any]]              # shape (k,)
    t: NDArray[np.floating[Any]]               # shape (R, k)
    R: int
    bias: NDArray[np.floating[Any]]            # shape (k,)
    se: NDArray[np.floating[Any]]              # shape (k,)
    ci: dict[str, NDArray] | None = None       # keyed by CI type, (k, 2)
    ci_conf_level: float | None = None
    ci_fallbacks: tuple[str, ...] = ()         # BCa components replaced by perc


@dataclass(frozen=True)
class PermutationParams:
    """
    Parameter payload for permutation test results.

    - observed_stat: test statistic on original (unpermuted) data
    - perm_stats: null distribution from R permutations
    - count: permuted statistics at least as extreme as observed
    - p_value: count / R, or the bound 1/R when count is 0
    - p_value_is_bound: True when p_value is the resolution bound
    - p_value_corrected: (count + 1) / (R + 1), Phipson-Smyth
    """
    observed_stat: float
    perm_stats: NDArray[np.floating[Any]]      # shape (R,)
    count: int
    p_value: float
    p_value_is_bound: bool
    p_value_corrected: float
    R: int
    alternative: str
