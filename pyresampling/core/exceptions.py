"""
Exception hierarchy for PyResampling.

All exceptions inherit from PyResamplingError to allow catching any
library-specific error. ValidationError also derives from ValueError so
callers that guard on the builtin keep working.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyResamplingError(Exception):
    """Base exception for all PyResampling errors."""
    pass


class ValidationError(PyResamplingError, ValueError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks: too few
    observations, a replicate count below 1, unknown option strings,
    mismatched strata. Never retried.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class NumericalError(PyResamplingError):
    """
    Numerical computation failed.

    Base class for errors arising during resampling or interval
    computation rather than from the inputs themselves.
    """
    pass


class StatisticComputationError(NumericalError):
    """
    The user statistic could not be evaluated.

    Raised when the supplied statistic function raises, or returns an
    output of the wrong length, for some resample. Failed replicates are
    never dropped: a partial replicate set would bias every summary
    computed from it.

    Attributes:
        replicate: 0-based replicate index, or None when the failure
            happened on the original (unresampled) data
        stage: Where the failure happened: 't0', 'replicate',
            'jackknife' or 'permutation'
    """

    def __init__(
        self,
        message: str,
        replicate: int | None = None,
        stage: str | None = None,
    ):
        super().__init__(message)
        self.replicate = replicate
        self.stage = stage


class DegenerateDistributionError(NumericalError):
    """
    Replicate distribution is degenerate and no fallback is defined.

    Attributes:
        statistic_index: Component of the statistic vector affected
    """

    def __init__(self, message: str, statistic_index: int | None = None):
        super().__init__(message)
        self.statistic_index = statistic_index


class DegenerateDistributionWarning(UserWarning):
    """
    A confidence interval fell back to a simpler method.

    Emitted when a replicate set has zero spread or the BCa acceleration
    is undefined, so the requested interval was replaced by a defined
    fallback instead of producing NaN.
    """
    pass
