"""Numerical helpers for functionals that lack an analytic gradient."""

from __future__ import annotations

from typing import Callable

import numpy as np

Array = np.ndarray


def approx_grad(
    fun: Callable[[Array], float],
    x: Array,
    eps: float = 1e-6,
    return_evals: bool = False,
) -> Array | tuple[Array, int]:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    return_evals:
        Also return the number of objective evaluations spent.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x, dtype=float)
    step = np.zeros_like(x)
    for i in range(x.size):
        step[i] = eps
        grad[i] = (fun(x + step) - fun(x - step)) / (2.0 * eps)
        step[i] = 0.0
    if return_evals:
        return grad, 2 * x.size
    return grad


def vector_norm(v: Array) -> float:
    """Euclidean norm as a Python float."""
    return float(np.linalg.norm(v))


__all__ = ["approx_grad", "vector_norm"]
