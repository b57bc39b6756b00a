"""
PyResampling: bootstrap and permutation inference for Python.

Nonparametric resampling with R-compatible semantics (boot, boot.ci)
and reproducible, seedable random streams.

Submodules:
    montecarlo: Bootstrap replicates, confidence intervals, permutation tests
    datasets: Reference tables used in examples and validation
    core: Shared exceptions, result envelope, validation, timing
"""

__version__ = "0.1.0"

from pyresampling import montecarlo
from pyresampling import datasets

__all__ = [
    "__version__",
    "montecarlo",
    "datasets",
]
