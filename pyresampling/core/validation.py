"""
Input validation utilities for PyResampling.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from numbers import Integral
from typing import Any, Iterable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyresampling.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Always returns a fresh copy so later in-place operations on the
    caller's array cannot leak into a design.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with float64 dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types "
            f"or non-numeric data"
        )

    if result.dtype == bool or not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return np.array(result, dtype=np.float64, copy=True)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim_in(
    array: NDArray[np.floating[Any]],
    allowed: tuple[int, ...],
    name: str,
) -> None:
    """
    Verify array dimensionality is one of the allowed values.

    Raises:
        DimensionError: If array.ndim is not in allowed
    """
    if array.ndim not in allowed:
        expected = " or ".join(f"{d}D" for d in allowed)
        raise DimensionError(
            f"{name}: expected {expected} array, got {array.ndim}D "
            f"with shape {array.shape}"
        )


def check_consistent_length(
    *arrays: NDArray,
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of "
            f"names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(
            f"{name} length ({length})" for name, length in zip(names, lengths)
        )
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray, min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Raises:
        ValidationError: If array has fewer than min_samples
    """
    n = array.shape[0] if array.ndim > 0 else 0
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} observation(s), got {n}"
        )


def check_replicates(R: Any, name: str = "R") -> int:
    """
    Verify a replicate/permutation count is an integer >= 1.

    Returns:
        R as a plain int

    Raises:
        ValidationError: If R is not an integer or is below 1
    """
    if isinstance(R, bool) or not isinstance(R, Integral):
        raise ValidationError(
            f"{name} must be an integer, got {type(R).__name__}"
        )
    if R < 1:
        raise ValidationError(f"{name} must be >= 1, got {R}")
    return int(R)


def check_choice(value: Any, choices: Iterable[str], name: str) -> None:
    """
    Verify an option string is one of the accepted values.

    Raises:
        ValidationError: If value is not in choices
    """
    choices = tuple(choices)
    if value not in choices:
        allowed = ", ".join(repr(c) for c in choices)
        raise ValidationError(
            f"{name} must be one of {allowed}, got {value!r}"
        )


def check_conf_level(conf: Any, name: str = "conf") -> float:
    """
    Verify a confidence level lies strictly between 0 and 1.

    Returns:
        conf as a float

    Raises:
        ValidationError: If conf is outside (0, 1)
    """
    try:
        conf_f = float(conf)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {conf!r}") from e
    if not 0.0 < conf_f < 1.0:
        raise ValidationError(
            f"{name} must be strictly between 0 and 1, got {conf_f}"
        )
    return conf_f
