"""
Threaded backends for bootstrap and permutation test.

Replicates are split into fixed-size chunks evaluated on a thread pool.
Every chunk draws from its own stream spawned from SeedSequence(seed),
and chunk boundaries depend only on R and the chunk size, so a seeded
run is reproducible regardless of the number of workers. The streams
differ from the CPU backend's single generator, so the two backends do
not produce identical replicate sets for the same seed.

Chunks write disjoint slices of a preallocated array; no locking is
needed. Threads help when the statistic releases the GIL (numpy/scipy
kernels on non-trivial data); for tiny pure-Python statistics the CPU
backend is usually faster.
"""

from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

import numpy as np

from pyresampling.core.result import Result
from pyresampling.core.compute.timing import Timer
from pyresampling.core.compute.tolerances import DEFAULT_CHUNK_SIZE
from pyresampling.core.exceptions import ValidationError
from pyresampling.montecarlo._common import BootParams, PermutationParams
from pyresampling.montecarlo._replicates import (
    balanced_indices,
    chunk_bounds,
    evaluate,
    fill_bootstrap,
    fill_permutations,
    observed_statistic,
    spawn_generators,
    strata_groups,
)
from pyresampling.montecarlo.backends.cpu import (
    count_extreme,
    permutation_p_value,
    summarize_replicates,
)
from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign


def _run_chunks(
    work: Callable[[int, int, np.random.Generator], None],
    bounds: list[tuple[int, int]],
    streams: list[np.random.Generator],
    n_workers: int,
) -> None:
    """
    Run work(start, stop, rng) for every chunk on a thread pool.

    Exceptions are re-raised in chunk order, so the reported failure is
    the lowest failing replicate block.
    """
    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        futures: list[Future] = [
            pool.submit(work, start, stop, rng)
            for (start, stop), rng in zip(bounds, streams)
        ]
        try:
            for future in futures:
                future.result()
        except BaseException:
            for future in futures:
                future.cancel()
            raise


class _ThreadedBackendBase:
    """Worker count and chunk size handling shared by both backends."""

    def __init__(
        self,
        n_workers: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if n_workers is None:
            n_workers = os.cpu_count() or 1
        if n_workers < 1:
            raise ValidationError(f"n_workers must be >= 1, got {n_workers}")
        if chunk_size < 1:
            raise ValidationError(f"chunk_size must be >= 1, got {chunk_size}")
        self._n_workers = int(n_workers)
        self._chunk_size = int(chunk_size)

    @property
    def n_workers(self) -> int:
        return self._n_workers

    @property
    def chunk_size(self) -> int:
        return self._chunk_size


class ThreadedBootstrapBackend(_ThreadedBackendBase):
    """
    Thread-pool backend for bootstrap resampling.

    Supports the same simulation types as CPUBootstrapBackend. Balanced
    indices are generated up front from a dedicated stream, then chunks
    only evaluate the statistic.
    """

    @property
    def name(self) -> str:
        return 'threads_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[BootParams]:
        """Run bootstrap across worker threads and return Result[BootParams]."""
        timer = Timer()
        timer.start()

        bounds = chunk_bounds(design.R, self._chunk_size)
        # Stream 0 is reserved for the balanced index pool
        streams = spawn_generators(design.seed, len(bounds) + 1)

        with timer.section('t0_computation'):
            t0 = observed_statistic(design)

        k = len(t0)
        t = np.empty((design.R, k), dtype=np.float64)

        with timer.section('bootstrap_replicates'):
            groups = strata_groups(design.strata)
            index_matrix = None
            if design.sim == "balanced":
                index_matrix = balanced_indices(
                    design.n, design.R, streams[0], groups,
                )

            def work(start: int, stop: int, rng: np.random.Generator) -> None:
                fill_bootstrap(
                    design, t, start, stop, rng,
                    groups=groups, index_matrix=index_matrix,
                )

            _run_chunks(work, bounds, streams[1:], self._n_workers)

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
                'n_workers': self._n_workers,
                'n_chunks': len(bounds),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )


class ThreadedPermutationBackend(_ThreadedBackendBase):
    """Thread-pool backend for permutation testing."""

    @property
    def name(self) -> str:
        return 'threads_permutation'

    def solve(self, design: PermutationDesign) -> Result[PermutationParams]:
        """Run permutation test across worker threads."""
        timer = Timer()
        timer.start()

        bounds = chunk_bounds(design.R, self._chunk_size)
        streams = spawn_generators(design.seed, len(bounds))

        with timer.section('observed_stat'):
            observed = float(evaluate(
                design.statistic, (design.x, design.y),
                stage="t0", k=1,
            )[0])

        with timer.section('permutation_replicates'):
            combined = np.concatenate([design.x, design.y])
            perm_stats = np.empty(design.R, dtype=np.float64)

            def work(start: int, stop: int, rng: np.random.Generator) -> None:
                fill_permutations(design, combined, perm_stats, start, stop, rng)

            _run_chunks(work, bounds, streams, self._n_workers)

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
                'n_workers': self._n_workers,
                'n_chunks': len(bounds),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
