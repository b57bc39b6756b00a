"""
Monte Carlo backends.

cpu: serial, single generator (default)
threads: thread pool, one spawned stream per replicate chunk
"""

from pyresampling.montecarlo.backends.cpu import (
    CPUBootstrapBackend,
    CPUPermutationBackend,
)
from pyresampling.montecarlo.backends.threads import (
    ThreadedBootstrapBackend,
    ThreadedPermutationBackend,
)

__all__ = [
    "CPUBootstrapBackend",
    "CPUPermutationBackend",
    "ThreadedBootstrapBackend",
    "ThreadedPermutationBackend",
]
