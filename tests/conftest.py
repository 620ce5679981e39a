"""Pytest configuration and shared fixtures for cgtrain tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Classic test problems shared by the optimizer tests
"""

import os

import numpy as np
import pytest
import torch

from cgtrain.optimize import Problem


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


@pytest.fixture
def rosenbrock_problem() -> Problem:
    return Problem(fun=rosenbrock, grad=rosenbrock_grad, parameters=np.array([-1.2, 1.0]))


@pytest.fixture
def quadratic_problem() -> Problem:
    A = np.array([[4.0, 1.0], [1.0, 3.0]])
    b = np.array([1.0, 2.0])

    def fun(x: np.ndarray) -> float:
        return 0.5 * x @ (A @ x) - b @ x

    def grad(x: np.ndarray) -> np.ndarray:
        return A @ x - b

    return Problem(fun=fun, grad=grad, parameters=np.array([3.0, -1.0]))
