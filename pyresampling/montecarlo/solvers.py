"""
Solver dispatch for Monte Carlo methods.

Provides R-named functions: boot(), boot_ci(), permutation_test(), plus
jackknife() for leave-one-out bias and standard error.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyresampling.core.exceptions import ValidationError
from pyresampling.core.compute.timing import Timer
from pyresampling.core.result import Result
from pyresampling.core.validation import check_conf_level
from pyresampling.montecarlo._ci import compute_ci, resolve_types
from pyresampling.montecarlo._influence import jackknife_values
from pyresampling.montecarlo._replicates import observed_statistic
from pyresampling.montecarlo.backends.cpu import (
    CPUBootstrapBackend,
    CPUPermutationBackend,
)
from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign
from pyresampling.montecarlo.solution import BootstrapSolution, PermutationSolution


BackendChoice = Literal['cpu', 'threads']


def _get_backend(kind: str, backend: str = 'cpu', n_workers: int | None = None):
    """
    Select a bootstrap or permutation backend.

    'cpu' (default, also 'auto') is serial and reproduces the same
    replicates for a given seed. 'threads' spreads replicate chunks over
    a thread pool with one random stream per chunk.
    """
    if backend in ('cpu', 'auto'):
        if n_workers not in (None, 1):
            raise ValidationError(
                f"n_workers={n_workers} requires backend='threads'"
            )
        if kind == 'bootstrap':
            return CPUBootstrapBackend()
        return CPUPermutationBackend()
    if backend == 'threads':
        from pyresampling.montecarlo.backends.threads import (
            ThreadedBootstrapBackend,
            ThreadedPermutationBackend,
        )
        if kind == 'bootstrap':
            return ThreadedBootstrapBackend(n_workers=n_workers)
        return ThreadedPermutationBackend(n_workers=n_workers)
    raise ValidationError(
        f"Unknown backend: {backend!r}. Use 'cpu' or 'threads'."
    )


def boot(
    data: ArrayLike | BootstrapDesign,
    statistic: Callable | None = None,
    R: int = 999,
    *,
    sim: Literal["ordinary", "balanced", "parametric"] = "ordinary",
    stype: Literal["i", "f", "w"] = "i",
    strata: ArrayLike | None = None,
    ran_gen: Callable | None = None,
    mle: Any = None,
    seed: int | None = None,
    backend: str = 'cpu',
    n_workers: int | None = None,
) -> BootstrapSolution:
    """
    Bootstrap resampling. Matches R boot::boot().

    Parameters
    ----------
    data : array-like or BootstrapDesign
        Observations, shape (n,) or (n, p). Rows are resampled.
    statistic : callable
        Nonparametric: ``statistic(data, selector)`` returning a scalar
        or a fixed-length vector. ``selector`` holds indices, frequencies
        or weights depending on ``stype``. Parametric:
        ``statistic(simulated_data)``.
    R : int
        Number of bootstrap replicates (>= 1). Default 999.
    sim : str
        "ordinary" (default), "balanced", or "parametric".
    stype : str
        "i" (indices, default), "f" (frequencies), "w" (weights).
    strata : array-like or None
        Resample within each stratum; stratum sizes are preserved.
    ran_gen : callable or None
        ``ran_gen(data, mle, rng)`` for the parametric bootstrap.
    mle : any
        Parameter estimates passed to ``ran_gen``.
    seed : int or None
        Random seed. A fixed seed reproduces the replicate set.
    backend : str
        'cpu' (default) or 'threads'.
    n_workers : int or None
        Thread count for backend='threads'. Default os.cpu_count().

    Returns
    -------
    BootstrapSolution
        t0, t (R x k), bias, se, timing and provenance.

    Raises
    ------
    ValidationError
        On invalid inputs (R < 1, empty data, unknown options).
    StatisticComputationError
        If the statistic fails on the original data or any replicate.
        ``replicate`` holds the failing replicate index.
    """
    if isinstance(data, BootstrapDesign):
        design = data
    else:
        if statistic is None:
            raise ValidationError("statistic is required")
        design = BootstrapDesign.for_bootstrap(
            data, statistic, R,
            sim=sim,
            stype=stype,
            strata=strata,
            ran_gen=ran_gen,
            mle=mle,
            seed=seed,
        )

    be = _get_backend('bootstrap', backend, n_workers)
    result = be.solve(design)
    return BootstrapSolution(_result=result, _design=design)


def boot_ci(
    boot_out: BootstrapSolution,
    *,
    type: str | list[str] = "all",
    conf: float = 0.95,
    index: int | None = None,
    var_t0: float | None = None,
    var_t: ArrayLike | None = None,
    bias_correct: bool = False,
) -> BootstrapSolution:
    """
    Bootstrap confidence intervals. Matches R boot::boot.ci().

    Parameters
    ----------
    boot_out : BootstrapSolution
        Output of boot().
    type : str or list of str
        "normal", "basic", "perc", "bca", "stud", or "all" (default).
        "all" includes "stud" only when ``var_t`` is given.
    conf : float
        Confidence level in (0, 1). Default 0.95.
    index : int or None
        Statistic component to compute. None computes every component
        (studentized uses component 0).
    var_t0 : float or None
        Variance of the observed statistic (normal and studentized).
        It describes one component, so a multi-component statistic
        needs ``index`` when the normal interval is requested.
    var_t : array-like or None
        Per-replicate variance estimates, length R. Required for "stud".
    bias_correct : bool
        Center the normal interval at 2*t0 - mean(t*) as R's boot.ci
        does. Default False centers it at t0.

    Returns
    -------
    BootstrapSolution
        A new solution with ``ci`` populated; ``boot_out`` is unchanged.
        BCa components that fell back to the percentile interval are
        listed in ``warnings`` and ``ci_fallbacks``.

    Raises
    ------
    ValidationError
        Unknown CI type, conf outside (0, 1), index out of range,
        "stud" without ``var_t``, or ``var_t0`` for a multi-component
        normal interval without ``index``.
    DegenerateDistributionError
        Studentized interval with no positive per-replicate variance.
    """
    conf = check_conf_level(conf, "conf")
    k = boot_out.k
    if index is not None and not 0 <= index < k:
        raise ValidationError(
            f"index must be in [0, {k - 1}], got {index}"
        )

    types = resolve_types(type, has_var_t=var_t is not None)
    ci_dict, fallbacks = compute_ci(
        boot_out.t0, boot_out.t, boot_out._design, types, conf,
        index=index, var_t0=var_t0, var_t=var_t,
        bias_correct=bias_correct,
    )

    old = boot_out._result
    params = dataclasses.replace(
        old.params,
        ci=ci_dict,
        ci_conf_level=conf,
        ci_fallbacks=tuple(fallbacks),
    )
    result = dataclasses.replace(
        old,
        params=params,
        info={**old.info, 'ci_types': tuple(types)},
        warnings=old.warnings + tuple(fallbacks),
    )
    return BootstrapSolution(_result=result, _design=boot_out._design)


@dataclasses.dataclass(frozen=True)
class JackknifeParams:
    """Delete-one jackknife estimates."""
    t0: NDArray                # shape (k,)
    values: NDArray            # shape (n, k), leave-one-out statistics
    bias: NDArray              # (n-1) * (mean(values) - t0)
    se: NDArray                # sqrt((n-1)/n * sum((values - mean)^2))


def jackknife(
    data: ArrayLike,
    statistic: Callable,
    *,
    stype: Literal["i", "f", "w"] = "i",
) -> Result[JackknifeParams]:
    """
    Delete-one jackknife bias and standard error.

    Uses the bootstrap calling convention, so any statistic written for
    boot() works unchanged.

    Raises
    ------
    ValidationError
        If data has fewer than 2 observations.
    StatisticComputationError
        If the statistic fails on a leave-one-out sample.
    """
    design = BootstrapDesign.for_bootstrap(data, statistic, 1, stype=stype)
    if design.n < 2:
        raise ValidationError(
            f"data: requires at least 2 observations for the jackknife, "
            f"got {design.n}"
        )

    timer = Timer()
    timer.start()
    with timer.section('t0_computation'):
        t0 = observed_statistic(design)
    with timer.section('leave_one_out'):
        values = jackknife_values(design)
    timer.stop()

    n = design.n
    mean_jack = np.mean(values, axis=0)
    params = JackknifeParams(
        t0=t0,
        values=values,
        bias=(n - 1) * (mean_jack - t0),
        se=np.sqrt((n - 1) / n * np.sum((values - mean_jack) ** 2, axis=0)),
    )
    return Result(
        params=params,
        info={'n': n, 'k': len(t0), 'stype': stype},
        timing=timer.result(),
        backend_name='cpu_jackknife',
    )


def permutation_test(
    x: ArrayLike | PermutationDesign,
    y: ArrayLike | None = None,
    statistic: Callable | None = None,
    R: int = 9999,
    *,
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    seed: int | None = None,
    backend: str = 'cpu',
    n_workers: int | None = None,
) -> PermutationSolution:
    """
    Two-sample permutation test.

    Pools x and y, reassigns group labels by a random permutation that
    preserves the group sizes, and recomputes the statistic R times.

    Parameters
    ----------
    x, y : array-like or PermutationDesign
        The two groups, shape (n1,) / (n2,) or with matching columns.
    statistic : callable
        ``statistic(x, y) -> float``, e.g. difference of means.
    R : int
        Number of permutations (>= 1). Default 9999.
    alternative : str
        "two.sided" (default) counts |T*| >= |T| directly; no
        symmetry is assumed. "greater" counts T* >= T, "less" T* <= T.
    seed : int or None
        Random seed.
    backend : str
        'cpu' (default) or 'threads'.
    n_workers : int or None
        Thread count for backend='threads'.

    Returns
    -------
    PermutationSolution
        p_value = count / R. When no permutation is as extreme,
        p_value is the bound 1/R and p_value_is_bound is True.

    Raises
    ------
    ValidationError
        Empty groups, R < 1, unknown alternative.
    StatisticComputationError
        If the statistic fails on the observed split or a permutation.
    """
    if isinstance(x, PermutationDesign):
        design = x
    else:
        if y is None or statistic is None:
            raise ValidationError("y and statistic are required")
        design = PermutationDesign.for_permutation_test(
            x, y, statistic, R,
            alternative=alternative,
            seed=seed,
        )

    be = _get_backend('permutation', backend, n_workers)
    result = be.solve(design)
    return PermutationSolution(_result=result, _design=design)
