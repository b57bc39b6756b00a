"""
Core infrastructure for PyResampling.

Shared abstractions used by the resampling domain package.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    compute: Timing and numerical tolerances
"""

from pyresampling.core.result import Result
from pyresampling.core.exceptions import (
    PyResamplingError,
    ValidationError,
    DimensionError,
    NumericalError,
    StatisticComputationError,
    DegenerateDistributionError,
    DegenerateDistributionWarning,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyResamplingError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "StatisticComputationError",
    "DegenerateDistributionError",
    "DegenerateDistributionWarning",
]
