"""Training-rate algorithms: one-dimensional minimization along a direction.

Every algorithm implements the ``TrainingRateAlgorithm`` protocol and
returns ``(rate, performance_at_rate)``. A rate of zero together with the
unchanged performance signals that no decrease could be found.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

import numpy as np

from .core import Array, Objective

_INV_GOLDEN = (math.sqrt(5.0) - 1.0) / 2.0


def backtracking_armijo(
    phi: Callable[[float], float],
    phi0: float,
    slope: Optional[float],
    alpha0: float = 1.0,
    rho: float = 0.5,
    c: float = 1e-4,
    max_iter: int = 50,
) -> tuple[float, float, int]:
    """Classic Armijo backtracking on ``phi(alpha) = f(x + alpha p)``.

    Without a usable (negative) slope the sufficient decrease test reduces
    to plain decrease. Returns ``(alpha, phi(alpha), nfev)``; alpha is 0
    when no acceptable step was found.
    """
    if not (0 < c < 1):
        raise ValueError("Armijo constant c must lie in (0, 1)")
    if not (0 < rho < 1):
        raise ValueError("rho must lie in (0, 1)")
    if alpha0 <= 0:
        raise ValueError("alpha0 must be positive")
    decrease = slope if slope is not None and slope < 0 else 0.0
    alpha = float(alpha0)
    nfev = 0
    for _ in range(max_iter):
        value = phi(alpha)
        nfev += 1
        if value < phi0 and value <= phi0 + c * alpha * decrease:
            return alpha, value, nfev
        alpha *= rho
    return 0.0, phi0, nfev


def golden_section(
    phi: Callable[[float], float],
    phi0: float,
    alpha0: float = 0.01,
    bracketing_factor: float = 1.5,
    tolerance: float = 1e-6,
    max_iter: int = 200,
    maximum_rate: float = 1e6,
) -> tuple[float, float, int]:
    """Bracket a minimum of ``phi`` on ``(0, inf)`` and reduce it by golden section.

    The bracket is found by shrinking ``alpha0`` while no decrease is seen,
    or expanding it by ``bracketing_factor`` while the function keeps
    decreasing. Returns ``(alpha, phi(alpha), nfev)``.
    """
    if bracketing_factor <= 1.0:
        raise ValueError("bracketing_factor must be greater than 1")
    if tolerance <= 0:
        raise ValueError("tolerance must be positive")
    if alpha0 <= 0:
        raise ValueError("alpha0 must be positive")

    nfev = 0

    def evaluate(alpha: float) -> float:
        nonlocal nfev
        nfev += 1
        return phi(alpha)

    a = 0.0
    c = float(alpha0)
    fc = evaluate(c)

    if fc >= phi0:
        while fc >= phi0:
            b = c
            c = b / bracketing_factor
            if c < tolerance:
                return 0.0, phi0, nfev
            fc = evaluate(c)
    else:
        b = c * bracketing_factor
        fb = evaluate(b)
        while fb < fc:
            if b >= maximum_rate:
                return b, fb, nfev
            a, c, fc = c, b, fb
            b = c * bracketing_factor
            fb = evaluate(b)

    best_alpha, best_value = c, fc
    x1 = b - _INV_GOLDEN * (b - a)
    x2 = a + _INV_GOLDEN * (b - a)
    f1 = evaluate(x1)
    f2 = evaluate(x2)
    for _ in range(max_iter):
        if b - a <= tolerance:
            break
        if f1 < f2:
            b, x2, f2 = x2, x1, f1
            x1 = b - _INV_GOLDEN * (b - a)
            f1 = evaluate(x1)
        else:
            a, x1, f1 = x1, x2, f2
            x2 = a + _INV_GOLDEN * (b - a)
            f2 = evaluate(x2)
    for alpha, value in ((x1, f1), (x2, f2)):
        if value < best_value:
            best_alpha, best_value = alpha, value
    return best_alpha, best_value, nfev


def _line_function(objective: Objective, parameters: Array, direction: Array) -> Callable[[float], float]:
    parameters = np.asarray(parameters, dtype=float)
    direction = np.asarray(direction, dtype=float)
    if parameters.shape != direction.shape:
        raise ValueError(
            f"direction shape {direction.shape} does not match parameters {parameters.shape}"
        )

    def phi(alpha: float) -> float:
        return float(objective(parameters + alpha * direction))

    return phi


class FixedTrainingRate:
    """Always step by the same rate."""

    def __init__(self, rate: float = 0.01) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.rate = float(rate)

    def search(
        self,
        objective: Objective,
        parameters: Array,
        direction: Array,
        performance: float,
        *,
        initial_rate: Optional[float] = None,
        slope: Optional[float] = None,
    ) -> tuple[float, float]:
        phi = _line_function(objective, parameters, direction)
        return self.rate, phi(self.rate)


class BacktrackingTrainingRate:
    """Armijo backtracking starting from ``first_rate`` every iteration."""

    def __init__(self, first_rate: float = 1.0, rho: float = 0.5, c: float = 1e-4, max_iter: int = 50) -> None:
        self.first_rate = first_rate
        self.rho = rho
        self.c = c
        self.max_iter = max_iter

    def search(
        self,
        objective: Objective,
        parameters: Array,
        direction: Array,
        performance: float,
        *,
        initial_rate: Optional[float] = None,
        slope: Optional[float] = None,
    ) -> tuple[float, float]:
        phi = _line_function(objective, parameters, direction)
        alpha, value, _ = backtracking_armijo(
            phi,
            performance,
            slope,
            alpha0=self.first_rate,
            rho=self.rho,
            c=self.c,
            max_iter=self.max_iter,
        )
        return alpha, value


class GoldenSectionTrainingRate:
    """Bracketing plus golden-section reduction, seeded with the previous rate."""

    def __init__(
        self,
        first_rate: float = 0.01,
        bracketing_factor: float = 1.5,
        tolerance: float = 1e-6,
        max_iter: int = 200,
        maximum_rate: float = 1e6,
    ) -> None:
        self.first_rate = first_rate
        self.bracketing_factor = bracketing_factor
        self.tolerance = tolerance
        self.max_iter = max_iter
        self.maximum_rate = maximum_rate

    def search(
        self,
        objective: Objective,
        parameters: Array,
        direction: Array,
        performance: float,
        *,
        initial_rate: Optional[float] = None,
        slope: Optional[float] = None,
    ) -> tuple[float, float]:
        phi = _line_function(objective, parameters, direction)
        alpha0 = initial_rate if initial_rate is not None and initial_rate > 0 else self.first_rate
        alpha, value, _ = golden_section(
            phi,
            performance,
            alpha0=alpha0,
            bracketing_factor=self.bracketing_factor,
            tolerance=self.tolerance,
            max_iter=self.max_iter,
            maximum_rate=self.maximum_rate,
        )
        return alpha, value


__all__ = [
    "BacktrackingTrainingRate",
    "FixedTrainingRate",
    "GoldenSectionTrainingRate",
    "backtracking_armijo",
    "golden_section",
]
