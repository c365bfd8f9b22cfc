"""Pytest configuration for rescue_spec tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the repository root to the path so the package imports without installing
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible random field elements."""
    return np.random.default_rng(0x5E5C)


@pytest.fixture(scope="session")
def params():
    """Default width-3 / rate-2 parameters, generated once per session."""
    from rescue_spec.params import rescue_prime_params
    return rescue_prime_params()
