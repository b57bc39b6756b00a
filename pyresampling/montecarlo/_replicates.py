"""
Replicate generation shared by the CPU and threaded backends.

Index drawing, selector conversion (indices/frequencies/weights),
statistic evaluation with failure attribution, and fill routines that
write a contiguous block [start, stop) of the replicate array. A serial
run is a single block; the threaded backends hand out many blocks, each
with its own random stream.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray

from pyresampling.core.exceptions import StatisticComputationError
from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign


def strata_groups(strata: NDArray | None) -> list[NDArray] | None:
    """Row positions of each stratum, in sorted stratum order."""
    if strata is None:
        return None
    return [np.flatnonzero(strata == s) for s in np.unique(strata)]


def draw_indices(
    n: int,
    rng: np.random.Generator,
    groups: list[NDArray] | None = None,
) -> NDArray:
    """
    Draw n row indices uniformly with replacement.

    With strata, each stratum is resampled from its own rows so stratum
    sizes are preserved.
    """
    if groups is None:
        return rng.integers(0, n, size=n)

    indices = np.empty(n, dtype=np.intp)
    for rows in groups:
        indices[rows] = rng.choice(rows, size=len(rows), replace=True)
    return indices


def balanced_indices(
    n: int,
    R: int,
    rng: np.random.Generator,
    groups: list[NDArray] | None = None,
) -> NDArray:
    """
    Balanced bootstrap index matrix, shape (R, n).

    Each observation appears exactly R times over all rows: a pool of
    n*R indices (per stratum when stratified) is shuffled and split.
    """
    if groups is None:
        pool = np.tile(np.arange(n), R)
        rng.shuffle(pool)
        return pool.reshape(R, n)

    all_indices = np.empty((R, n), dtype=np.intp)
    for rows in groups:
        ns = len(rows)
        pool = np.tile(rows, R)
        rng.shuffle(pool)
        all_indices[:, rows] = pool.reshape(R, ns)
    return all_indices


def selector_for(indices: NDArray, n: int, stype: str) -> NDArray:
    """Convert resampled indices to the statistic's second argument."""
    if stype == "i":
        return indices
    freqs = np.bincount(indices, minlength=n).astype(np.float64)
    if stype == "f":
        return freqs
    return freqs / n


def identity_selector(n: int, stype: str) -> NDArray:
    """Selector representing the original, unresampled data."""
    if stype == "i":
        return np.arange(n)
    if stype == "f":
        return np.ones(n, dtype=np.float64)
    return np.full(n, 1.0 / n)


def evaluate(
    statistic: Callable,
    args: tuple,
    *,
    stage: str,
    replicate: int | None = None,
    k: int | None = None,
) -> NDArray:
    """
    Call the statistic and coerce its output to a float64 vector.

    Raises:
        StatisticComputationError: If the statistic raises, returns
            something non-numeric or non-finite, or returns a vector of
            length != k.
    """
    where = "original data" if replicate is None else f"replicate {replicate}"
    try:
        value = np.atleast_1d(
            np.asarray(statistic(*args), dtype=np.float64)
        ).ravel()
    except Exception as e:
        raise StatisticComputationError(
            f"statistic failed on {where} ({stage}): "
            f"{type(e).__name__}: {e}",
            replicate=replicate,
            stage=stage,
        ) from e

    if k is not None and value.shape[0] != k:
        raise StatisticComputationError(
            f"statistic returned {value.shape[0]} value(s) on {where} "
            f"({stage}), expected {k} as on the original data",
            replicate=replicate,
            stage=stage,
        )

    if not np.all(np.isfinite(value)):
        bad = np.flatnonzero(~np.isfinite(value)).tolist()
        raise StatisticComputationError(
            f"statistic returned a non-finite value on {where} ({stage}) "
            f"at component(s) {bad}: {value[bad].tolist()}",
            replicate=replicate,
            stage=stage,
        )
    return value


def observed_statistic(design: BootstrapDesign) -> NDArray:
    """t0: the statistic on the original data."""
    if design.sim == "parametric":
        args = (design.data,)
    else:
        args = (design.data, identity_selector(design.n, design.stype))
    return evaluate(design.statistic, args, stage="t0")


def fill_bootstrap(
    design: BootstrapDesign,
    t: NDArray,
    start: int,
    stop: int,
    rng: np.random.Generator,
    *,
    groups: list[NDArray] | None = None,
    index_matrix: NDArray | None = None,
) -> None:
    """
    Compute replicates start..stop-1 into rows of t.

    Args:
        design: Validated bootstrap design.
        t: Output array, shape (R, k). Only rows [start, stop) are written.
        start, stop: Replicate block.
        rng: Random stream for this block.
        groups: Precomputed strata groups (ordinary sim).
        index_matrix: Precomputed balanced indices, shape (R, n).
    """
    data = design.data
    statistic = design.statistic
    n = design.n
    k = t.shape[1]

    for b in range(start, stop):
        if design.sim == "parametric":
            sim_data = design.ran_gen(data, design.mle, rng)
            t[b] = evaluate(
                statistic, (sim_data,),
                stage="replicate", replicate=b, k=k,
            )
            continue

        if index_matrix is not None:
            indices = index_matrix[b]
        else:
            indices = draw_indices(n, rng, groups)

        t[b] = evaluate(
            statistic, (data, selector_for(indices, n, design.stype)),
            stage="replicate", replicate=b, k=k,
        )


def fill_permutations(
    design: PermutationDesign,
    combined: NDArray,
    out: NDArray,
    start: int,
    stop: int,
    rng: np.random.Generator,
) -> None:
    """
    Compute permuted statistics start..stop-1 into out.

    Each permutation shuffles the pooled rows without replacement and
    splits them back into groups of the original sizes.
    """
    n1 = design.n1
    n_total = combined.shape[0]
    statistic = design.statistic

    for b in range(start, stop):
        perm = rng.permutation(n_total)
        value = evaluate(
            statistic, (combined[perm[:n1]], combined[perm[n1:]]),
            stage="permutation", replicate=b, k=1,
        )
        out[b] = value[0]


def chunk_bounds(R: int, chunk_size: int) -> list[tuple[int, int]]:
    """Split range(R) into consecutive [start, stop) blocks."""
    return [
        (start, min(start + chunk_size, R))
        for start in range(0, R, chunk_size)
    ]


def spawn_generators(
    seed: int | None,
    n_streams: int,
) -> list[np.random.Generator]:
    """Independent generators derived from one SeedSequence."""
    root = np.random.SeedSequence(seed)
    return [np.random.default_rng(child) for child in root.spawn(n_streams)]
