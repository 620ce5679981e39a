"""Conjugate direction updates (Polak-Ribiere and Fletcher-Reeves).

All functions here are pure: they depend only on their arguments and never
modify them.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .core import Array, TrainingDirectionMethod

DirectionUpdate = Callable[[Array, Array, Array], Array]


def _check_shapes(old_gradient: Array, gradient: Array, old_direction: Optional[Array] = None) -> None:
    if old_gradient.shape != gradient.shape:
        raise ValueError(
            f"gradient shapes differ: {old_gradient.shape} vs {gradient.shape}"
        )
    if old_direction is not None and old_direction.shape != gradient.shape:
        raise ValueError(
            f"direction shape {old_direction.shape} does not match gradient {gradient.shape}"
        )


def fletcher_reeves_parameter(old_gradient: Array, gradient: Array) -> float:
    """Return ``|g|^2 / |g_old|^2``, or 0 when the old gradient vanishes."""
    old_gradient = np.asarray(old_gradient, dtype=float)
    gradient = np.asarray(gradient, dtype=float)
    _check_shapes(old_gradient, gradient)
    denominator = float(np.dot(old_gradient, old_gradient))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(gradient, gradient)) / denominator


def polak_ribiere_parameter(old_gradient: Array, gradient: Array) -> float:
    """Return ``g . (g - g_old) / |g_old|^2`` clamped below at zero (PR+).

    A vanishing old gradient also yields zero.
    """
    old_gradient = np.asarray(old_gradient, dtype=float)
    gradient = np.asarray(gradient, dtype=float)
    _check_shapes(old_gradient, gradient)
    denominator = float(np.dot(old_gradient, old_gradient))
    if denominator == 0.0:
        return 0.0
    beta = float(np.dot(gradient, gradient - old_gradient)) / denominator
    return max(beta, 0.0)


def gradient_descent_direction(gradient: Array) -> Array:
    """Steepest descent direction ``-g``."""
    return -np.asarray(gradient, dtype=float)


def fletcher_reeves_direction(old_gradient: Array, gradient: Array, old_direction: Array) -> Array:
    old_direction = np.asarray(old_direction, dtype=float)
    _check_shapes(np.asarray(old_gradient), np.asarray(gradient), old_direction)
    beta = fletcher_reeves_parameter(old_gradient, gradient)
    return gradient_descent_direction(gradient) + beta * old_direction


def polak_ribiere_direction(old_gradient: Array, gradient: Array, old_direction: Array) -> Array:
    old_direction = np.asarray(old_direction, dtype=float)
    _check_shapes(np.asarray(old_gradient), np.asarray(gradient), old_direction)
    beta = polak_ribiere_parameter(old_gradient, gradient)
    return gradient_descent_direction(gradient) + beta * old_direction


_UPDATES: dict[TrainingDirectionMethod, DirectionUpdate] = {
    TrainingDirectionMethod.PR: polak_ribiere_direction,
    TrainingDirectionMethod.FR: fletcher_reeves_direction,
}


def select_direction_update(method: TrainingDirectionMethod | str) -> DirectionUpdate:
    """Return the update function for ``method``, resolved once per run."""
    return _UPDATES[TrainingDirectionMethod.parse(method)]


def training_direction(
    method: TrainingDirectionMethod | str,
    gradient: Array,
    old_gradient: Optional[Array] = None,
    old_direction: Optional[Array] = None,
) -> Array:
    """Next search direction.

    Without a previous gradient and direction (first iteration) this is the
    steepest descent direction for both methods.
    """
    if old_gradient is None or old_direction is None:
        return gradient_descent_direction(gradient)
    return select_direction_update(method)(old_gradient, gradient, old_direction)


__all__ = [
    "DirectionUpdate",
    "fletcher_reeves_direction",
    "fletcher_reeves_parameter",
    "gradient_descent_direction",
    "polak_ribiere_direction",
    "polak_ribiere_parameter",
    "select_direction_update",
    "training_direction",
]
