"""
PyResampling Monte Carlo methods.

Provides bootstrap resampling (matching R's boot package), bootstrap
confidence intervals and permutation testing with serial and threaded
backends.

Usage:
    from pyresampling.montecarlo import boot, boot_ci, permutation_test

    # Bootstrap
    result = boot(data, statistic, R=999, seed=42)
    ci_result = boot_ci(result, type="perc")

    # Permutation test
    result = permutation_test(x, y, statistic, R=9999)
"""

from pyresampling.montecarlo import statistics
from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign
from pyresampling.montecarlo.solution import BootstrapSolution, PermutationSolution
from pyresampling.montecarlo.solvers import (
    boot,
    boot_ci,
    jackknife,
    permutation_test,
)
from pyresampling.montecarlo._influence import jackknife_influence

__all__ = [
    "boot",
    "boot_ci",
    "jackknife",
    "jackknife_influence",
    "permutation_test",
    "statistics",
    "BootstrapDesign",
    "PermutationDesign",
    "BootstrapSolution",
    "PermutationSolution",
]
