"""
Generic result container for all PyResampling computations.

The Result class provides a standardized envelope that all domain-specific
results use. This enables shared tooling for timing, reproducibility and
diagnostics while allowing domains to define their own parameter structures.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (n, k, chunking, fallbacks)
    - timing is optional (don't burden unit tests)
    - provenance for reproducibility (package and numpy versions)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, Any]:
    """Generate minimal provenance metadata."""
    import numpy as np
    import pyresampling

    return {
        'pyresampling_version': pyresampling.__version__,
        'numpy_version': np.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for resampling computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (replicates, intervals, p-values)
        info: Structured metadata (sizes, simulation type, chunking)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Version metadata of the producing environment

    Examples:
        >>> Result(
        ...     params=BootParams(t0=t0, t=t, R=999, bias=bias, se=se),
        ...     info={'sim': 'ordinary', 'n': 32, 'k': 1},
        ...     timing={'total_seconds': 0.05},
        ...     backend_name='cpu_bootstrap',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, Any] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
