"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyresampling.datasets import MTCARS_COLUMNS, column, mtcars


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def wt_mpg():
    """mtcars weight/mpg pairs, shape (32, 2)."""
    cols = [column(MTCARS_COLUMNS, "wt"), column(MTCARS_COLUMNS, "mpg")]
    return mtcars[:, cols]


@pytest.fixture
def skewed_sample():
    """Right-skewed sample (nonzero BCa acceleration)."""
    return np.array([0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 50.0])
