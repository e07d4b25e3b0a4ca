"""Pytest configuration and shared fixtures for qoptim tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A quadratic bowl cost factory shared by the method tests
"""

import os

import numpy as np
import pytest
import torch

from qoptim import CallableCostFunction


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def quadratic_bowl():
    """Factory of costs ``sum((x - c)^2)`` with analytic gradients."""

    def make(center) -> CallableCostFunction:
        center = np.asarray(center, dtype=float)
        return CallableCostFunction(
            value_fn=lambda x: float(np.sum((x - center) ** 2)),
            values_fn=lambda x: x - center,
            gradient_fn=lambda x: 2.0 * (x - center),
        )

    return make
