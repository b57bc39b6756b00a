"""
Execution timing utilities.

Wall-clock section timing for resampling runs. Sections accumulate, so a
section entered once per chunk reports the summed time across chunks.
"""

import threading
import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer.

    Usage:
        timer = Timer()
        timer.start()

        with timer.section('t0_computation'):
            t0 = statistic(data, np.arange(n))

        with timer.section('bootstrap_replicates'):
            ...

        timer.stop()
        result = timer.result()
        # {'total_seconds': 0.05, 't0_computation': 0.001, ...}

    Section accumulation is guarded by a lock so worker threads may time
    their own chunks against a shared timer.
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._lock = threading.Lock()
        self._start_time: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        """Start the overall timer."""
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        """Stop the overall timer."""
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Time a named section.

        Args:
            name: Section identifier (used as key in result dict)

        Note:
            Sections can overlap with each other and with the total time.
            The timer does not enforce mutual exclusion.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._sections[name] = self._sections.get(name, 0.0) + elapsed

    def result(self) -> dict[str, float]:
        """
        Get timing results.

        Returns:
            Dictionary with 'total_seconds' and all section timings

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")

        result = {'total_seconds': self._total}
        result.update(self._sections)
        return result
