"""
Ready-made statistics in the boot()/permutation_test() calling convention.

    from pyresampling.montecarlo import boot, statistics

    result = boot(cars, statistics.spearman_of(2, 0), R=1000, seed=1)
    result = permutation_test(x, y, statistics.mean_difference, R=999)
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray
from scipy.stats import rankdata

from pyresampling.core.exceptions import ValidationError


def mean_of(column: int | None = None) -> Callable[[NDArray, NDArray], float]:
    """
    Sample mean of the resampled rows.

    Args:
        column: Column of 2D data to average. None for 1D data.
    """
    def statistic(data: NDArray, indices: NDArray) -> float:
        d = data[indices]
        if column is not None:
            d = d[:, column]
        return float(np.mean(d))

    return statistic


def spearman(x: NDArray, y: NDArray) -> float:
    """
    Spearman rank correlation. Matches R cor(method='spearman').

    Ranks each vector (average ties), then Pearson on ranks.

    Raises:
        ValidationError: If either vector is constant, where the
            correlation is undefined.
    """
    rx = rankdata(x, method='average')
    ry = rankdata(y, method='average')
    rx = rx - rx.mean()
    ry = ry - ry.mean()
    denom = np.sqrt(np.sum(rx ** 2) * np.sum(ry ** 2))
    if denom == 0:
        raise ValidationError(
            "spearman: correlation undefined, one of the vectors is constant"
        )
    return float(np.sum(rx * ry) / denom)


def spearman_of(
    x_col: int,
    y_col: int,
) -> Callable[[NDArray, NDArray], float]:
    """Spearman correlation between two columns of the resampled rows."""
    def statistic(data: NDArray, indices: NDArray) -> float:
        d = data[indices]
        return spearman(d[:, x_col], d[:, y_col])

    return statistic


def mean_difference(x: NDArray, y: NDArray) -> float:
    """Permutation statistic: mean(x) - mean(y)."""
    return float(np.mean(x) - np.mean(y))
