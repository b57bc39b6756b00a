"""
Bootstrap confidence interval computation.

Five interval types, each a pure function of the observed statistic,
one column of replicates and alpha = 1 - conf:
- normal: normal approximation, t0 +/- z * sd(t*)
- basic: basic (pivotal) bootstrap interval
- perc: percentile method
- bca: bias-corrected and accelerated
- stud: studentized (bootstrap-t)

Zero-spread replicate columns collapse normal/basic/perc to a point.
BCa never divides by a vanishing term: it falls back to the percentile
interval and reports the fallback.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyresampling.core.compute.tolerances import (
    BCA_DENOMINATOR_ATOL,
    DEGENERATE_SPREAD_RTOL,
)
from pyresampling.core.exceptions import (
    DegenerateDistributionError,
    DegenerateDistributionWarning,
    ValidationError,
)
from pyresampling.montecarlo._common import CI_TYPES
from pyresampling.montecarlo._influence import acceleration, jackknife_values

if TYPE_CHECKING:
    from pyresampling.montecarlo.design import BootstrapDesign


def is_degenerate(t_j: NDArray) -> bool:
    """
    True if a replicate column has (numerically) zero spread.

    Spread is judged against the column's largest magnitude, so an
    all-zero column is degenerate and a column of tiny but varying
    values is not.
    """
    spread = float(np.ptp(t_j))
    scale = float(np.max(np.abs(t_j)))
    return spread <= DEGENERATE_SPREAD_RTOL * scale


# ---------------------------------------------------------------------------
# Per-component estimators
# ---------------------------------------------------------------------------

def normal_interval(
    t0: float,
    t_j: NDArray,
    alpha: float,
    var_t0: float | None = None,
    bias_correct: bool = False,
) -> tuple[float, float]:
    """
    Normal approximation CI.

    CI = center -/+ z_{1-alpha/2} * se, with center = t0, or
    2*t0 - mean(t*) when bias_correct (R's boot.ci convention).
    se is sd(t*) unless var_t0 is supplied.
    """
    center = 2.0 * t0 - float(np.mean(t_j)) if bias_correct else t0

    if var_t0 is not None:
        se = float(np.sqrt(var_t0))
    elif len(t_j) < 2 or is_degenerate(t_j):
        se = 0.0
    else:
        se = float(np.std(t_j, ddof=1))

    z = sp_stats.norm.ppf(1.0 - alpha / 2.0)
    return center - z * se, center + z * se


def percentile_interval(t_j: NDArray, alpha: float) -> tuple[float, float]:
    """
    Percentile bootstrap CI.

    CI = [Q(alpha/2), Q(1-alpha/2)]

    Always brackets median(t*) for alpha < 1, but need not contain t0
    when the replicate distribution is biased.
    """
    return (
        float(np.quantile(t_j, alpha / 2.0)),
        float(np.quantile(t_j, 1.0 - alpha / 2.0)),
    )


def basic_interval(
    t0: float,
    t_j: NDArray,
    alpha: float,
) -> tuple[float, float]:
    """
    Basic (pivotal) bootstrap CI.

    CI = [2*t0 - Q(1-alpha/2), 2*t0 - Q(alpha/2)]

    Note: upper quantile of bootstrap gives lower bound.
    """
    q_lo, q_hi = percentile_interval(t_j, alpha)
    return 2.0 * t0 - q_hi, 2.0 * t0 - q_lo


def bca_interval(
    t0: float,
    t_j: NDArray,
    alpha: float,
    L: NDArray,
) -> tuple[tuple[float, float], str | None]:
    """
    BCa (bias-corrected and accelerated) CI.

    Steps:
    1. z0 = Phi^{-1}(proportion of t* < t0), clamped away from 0 and 1
    2. a = sum(L^3) / (6 * sum(L^2)^1.5) from jackknife influence L
    3. Adjusted levels Phi(z0 + (z0 + z) / (1 - a (z0 + z)))
    4. CI from the replicate quantiles at the adjusted levels

    Returns:
        ((lower, upper), reason). reason is None on success; otherwise
        it names why the percentile interval was returned instead.
    """
    if is_degenerate(t_j):
        return percentile_interval(t_j, alpha), "zero-variance replicates"

    a = acceleration(L)
    if a is None:
        return (
            percentile_interval(t_j, alpha),
            "acceleration undefined (all jackknife influence values are 0)",
        )

    R = len(t_j)
    prop_below = np.sum(t_j < t0) / R
    prop_below = np.clip(prop_below, 1.0 / (2.0 * R), 1.0 - 1.0 / (2.0 * R))
    z0 = sp_stats.norm.ppf(prop_below)

    levels = []
    for z_alpha in (sp_stats.norm.ppf(alpha / 2.0),
                    sp_stats.norm.ppf(1.0 - alpha / 2.0)):
        numer = z0 + z_alpha
        denom = 1.0 - a * numer
        if abs(denom) < BCA_DENOMINATOR_ATOL:
            return (
                percentile_interval(t_j, alpha),
                "adjusted level undefined (1 - a*(z0 + z) == 0)",
            )
        level = sp_stats.norm.cdf(z0 + numer / denom)
        levels.append(np.clip(level, 0.5 / R, 1.0 - 0.5 / R))

    return (
        (float(np.quantile(t_j, levels[0])),
         float(np.quantile(t_j, levels[1]))),
        None,
    )


def studentized_interval(
    t0: float,
    t_j: NDArray,
    alpha: float,
    var_t: NDArray,
    var_t0: float | None = None,
) -> tuple[float, float] | None:
    """
    Studentized (bootstrap-t) CI.

    For each replicate: z* = (t* - t0) / se*
    CI = [t0 - Q_z(1-alpha/2) * se_hat, t0 - Q_z(alpha/2) * se_hat]

    Replicates with non-positive variance are excluded from the pivot.
    Returns None when no replicate has a positive variance estimate.
    """
    var_t = np.asarray(var_t, dtype=np.float64)
    valid = np.isfinite(var_t) & (var_t > 0)
    if not np.any(valid):
        return None

    z_star = (t_j[valid] - t0) / np.sqrt(var_t[valid])
    q_lo = np.quantile(z_star, alpha / 2.0)
    q_hi = np.quantile(z_star, 1.0 - alpha / 2.0)

    if var_t0 is not None:
        se_hat = float(np.sqrt(var_t0))
    else:
        se_hat = float(np.std(t_j, ddof=1)) if len(t_j) > 1 else 0.0

    # Upper quantile gives lower bound
    return t0 - q_hi * se_hat, t0 - q_lo * se_hat


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def resolve_types(
    ci_type: str | list[str] | tuple[str, ...],
    has_var_t: bool,
) -> list[str]:
    """Expand 'all' and validate requested CI type names."""
    if isinstance(ci_type, str):
        requested = [ci_type]
    else:
        requested = list(ci_type)

    types: list[str] = []
    for name in requested:
        if name == "all":
            expanded = ["normal", "basic", "perc", "bca"]
            if has_var_t:
                expanded.append("stud")
        elif name in CI_TYPES:
            expanded = [name]
        else:
            allowed = ", ".join(repr(c) for c in CI_TYPES + ("all",))
            raise ValidationError(
                f"Unknown CI type: {name!r}. Must be one of {allowed}"
            )
        types.extend(x for x in expanded if x not in types)
    return types


def compute_ci(
    t0: NDArray,
    t: NDArray,
    design: 'BootstrapDesign',
    types: list[str],
    conf_level: float,
    *,
    index: int | None = None,
    var_t0: float | None = None,
    var_t: NDArray | None = None,
    bias_correct: bool = False,
) -> tuple[dict[str, NDArray], list[str]]:
    """
    Compute bootstrap confidence intervals.

    Args:
        t0: Observed statistics, shape (k,).
        t: Replicates, shape (R, k).
        design: Bootstrap design (needed for BCa jackknife).
        types: Resolved CI type names.
        conf_level: Confidence level (e.g., 0.95).
        index: Statistic component to compute. None computes all k
            (studentized uses component 0 when index is None).
        var_t0: Variance of the observed statistic.
        var_t: Per-replicate variances, shape (R,). Required for 'stud'.
        bias_correct: Center the normal interval at 2*t0 - mean(t*).

    Returns:
        (ci_dict, fallbacks). ci_dict maps CI type to an array of shape
        (k, 2); components not computed are NaN. fallbacks lists the
        BCa components replaced by the percentile interval.

    Raises:
        ValidationError: If stud is requested without var_t, or if
            var_t0 is given for the normal interval of a multi-component
            statistic without index.
        DegenerateDistributionError: If stud has no usable replicate.
    """
    k = len(t0)
    alpha = 1.0 - conf_level
    components = range(k) if index is None else [index]

    if var_t0 is not None and index is None and k > 1 and "normal" in types:
        raise ValidationError(
            f"var_t0 describes a single statistic component but t has {k}; "
            f"pass index to choose the component for the normal interval"
        )

    ci_dict: dict[str, NDArray] = {}
    fallbacks: list[str] = []

    for ci_type in types:
        ci = np.full((k, 2), np.nan, dtype=np.float64)

        if ci_type == "stud":
            if var_t is None:
                raise ValidationError(
                    "Studentized CI requires var_t "
                    "(per-replicate variance estimates)"
                )
            var_t = np.asarray(var_t, dtype=np.float64).ravel()
            if var_t.shape[0] != t.shape[0]:
                raise ValidationError(
                    f"var_t must have one entry per replicate "
                    f"({t.shape[0]}), got {var_t.shape[0]}"
                )
            j = 0 if index is None else index
            bounds = studentized_interval(
                float(t0[j]), t[:, j], alpha, var_t, var_t0,
            )
            if bounds is None:
                raise DegenerateDistributionError(
                    f"Studentized CI undefined for t{j + 1}*: no replicate "
                    f"has a positive variance estimate",
                    statistic_index=j,
                )
            ci[j] = bounds
            ci_dict["stud"] = ci
            continue

        jack = None
        for j in components:
            t_j = t[:, j]
            t0_j = float(t0[j])

            if ci_type == "normal":
                ci[j] = normal_interval(t0_j, t_j, alpha, var_t0, bias_correct)
            elif ci_type == "basic":
                ci[j] = basic_interval(t0_j, t_j, alpha)
            elif ci_type == "perc":
                ci[j] = percentile_interval(t_j, alpha)
            elif ci_type == "bca":
                if is_degenerate(t_j):
                    L = np.zeros(design.n)
                else:
                    if jack is None:
                        jack = (
                            jackknife_values(design) if design.n > 1
                            else np.zeros((1, k))
                        )
                    col = jack[:, j]
                    L = (design.n - 1) * (np.mean(col) - col)
                bounds, reason = bca_interval(t0_j, t_j, alpha, L)
                ci[j] = bounds
                if reason is not None:
                    message = (
                        f"BCa interval for t{j + 1}* fell back to the "
                        f"percentile interval: {reason}"
                    )
                    warnings.warn(message, DegenerateDistributionWarning,
                                  stacklevel=3)
                    fallbacks.append(message)

        ci_dict[ci_type] = ci

    return ci_dict, fallbacks
