"""
Design classes for Monte Carlo methods.

BootstrapDesign and PermutationDesign encapsulate all inputs needed
by backends to perform resampling. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pyresampling.core.exceptions import ValidationError
from pyresampling.core.validation import (
    check_array,
    check_choice,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_ndim_in,
    check_replicates,
)
from pyresampling.montecarlo._common import ALTERNATIVES, SIM_TYPES, STYPES


@dataclass(frozen=True)
class BootstrapDesign:
    """
    Frozen design for bootstrap resampling.

    Attributes:
        data: Copy of the original data, shape (n,) or (n, p).
        statistic: User function. For nonparametric: fn(data, selector)
            -> scalar or (k,). For parametric: fn(simulated_data).
        R: Number of bootstrap replicates.
        sim: Simulation type: "ordinary", "balanced", or "parametric".
        stype: What the second argument to statistic represents:
            "i" (indices), "f" (frequencies), "w" (weights).
        strata: Optional stratification vector of length n.
        ran_gen: For parametric bootstrap: fn(data, mle, rng) -> data.
        mle: Parameter estimates passed to ran_gen.
        seed: Random seed for reproducibility.
    """
    data: NDArray[np.floating[Any]]
    statistic: Callable
    R: int
    sim: str
    stype: str
    strata: NDArray | None
    ran_gen: Callable | None
    mle: Any
    seed: int | None

    @property
    def n(self) -> int:
        """Number of observations (rows)."""
        return self.data.shape[0]

    @classmethod
    def for_bootstrap(
        cls,
        data,
        statistic: Callable,
        R: int = 999,
        *,
        sim: str = "ordinary",
        stype: str = "i",
        strata=None,
        ran_gen: Callable | None = None,
        mle=None,
        seed: int | None = None,
    ) -> BootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            data: Input data, 1D or 2D array-like.
            statistic: Function computing the statistic of interest.
            R: Number of bootstrap replicates. Must be >= 1.
            sim: "ordinary" (default), "balanced", or "parametric".
            stype: "i" (indices), "f" (frequencies), "w" (weights).
            strata: Stratification vector (same length as data rows).
            ran_gen: Required for parametric bootstrap.
            mle: Parameter estimates for parametric bootstrap.
            seed: Random seed.

        Returns:
            Validated BootstrapDesign.

        Raises:
            ValidationError: If inputs are invalid.
        """
        data_arr = check_array(data, "data")
        check_ndim_in(data_arr, (1, 2), "data")
        check_min_samples(data_arr, 1, "data")
        check_finite(data_arr, "data")

        if not callable(statistic):
            raise ValidationError(
                f"statistic must be callable, got {type(statistic).__name__}"
            )

        R = check_replicates(R, "R")
        check_choice(sim, SIM_TYPES, "sim")
        check_choice(stype, STYPES, "stype")

        if sim == "parametric" and ran_gen is None:
            raise ValidationError(
                "ran_gen is required for parametric bootstrap "
                "(sim='parametric')"
            )

        strata_arr = None
        if strata is not None:
            strata_arr = np.array(strata, copy=True)
            if strata_arr.ndim != 1:
                raise ValidationError(
                    f"strata must be 1D, got shape {strata_arr.shape}"
                )
            check_consistent_length(
                strata_arr, data_arr, names=("strata", "data"),
            )
            strata_arr.setflags(write=False)

        data_arr.setflags(write=False)

        return cls(
            data=data_arr,
            statistic=statistic,
            R=R,
            sim=sim,
            stype=stype,
            strata=strata_arr,
            ran_gen=ran_gen,
            mle=mle,
            seed=seed,
        )


@dataclass(frozen=True)
class PermutationDesign:
    """
    Frozen design for permutation testing.

    Attributes:
        x: Group 1 data, shape (n1,) or (n1, p).
        y: Group 2 data, shape (n2,) or (n2, p).
        statistic: fn(x, y) -> float.
        R: Number of permutations.
        alternative: "two.sided", "less", or "greater".
        seed: Random seed for reproducibility.
    """
    x: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    statistic: Callable
    R: int
    alternative: str
    seed: int | None

    @property
    def n1(self) -> int:
        return self.x.shape[0]

    @property
    def n2(self) -> int:
        return self.y.shape[0]

    @classmethod
    def for_permutation_test(
        cls,
        x,
        y,
        statistic: Callable,
        R: int = 9999,
        *,
        alternative: str = "two.sided",
        seed: int | None = None,
    ) -> PermutationDesign:
        """
        Create a permutation test design with validation.

        Args:
            x: Group 1 data.
            y: Group 2 data.
            statistic: fn(x, y) -> float. The test statistic.
            R: Number of permutations. Must be >= 1.
            alternative: "two.sided", "less", or "greater".
            seed: Random seed.

        Returns:
            Validated PermutationDesign.

        Raises:
            ValidationError: If inputs are invalid.
        """
        x_arr = check_array(x, "x")
        y_arr = check_array(y, "y")

        if x_arr.ndim == 0 or y_arr.ndim == 0:
            raise ValidationError("x and y must be arrays, not scalars")

        check_ndim_in(x_arr, (1, 2), "x")
        check_ndim_in(y_arr, (1, 2), "y")
        check_min_samples(x_arr, 1, "x")
        check_min_samples(y_arr, 1, "y")
        check_finite(x_arr, "x")
        check_finite(y_arr, "y")

        if x_arr.shape[1:] != y_arr.shape[1:]:
            raise ValidationError(
                f"x and y must have the same number of columns, "
                f"got shapes {x_arr.shape} and {y_arr.shape}"
            )

        if not callable(statistic):
            raise ValidationError(
                f"statistic must be callable, got {type(statistic).__name__}"
            )

        R = check_replicates(R, "R")
        check_choice(alternative, ALTERNATIVES, "alternative")

        x_arr.setflags(write=False)
        y_arr.setflags(write=False)

        return cls(
            x=x_arr,
            y=y_arr,
            statistic=statistic,
            R=R,
            alternative=alternative,
            seed=seed,
        )
