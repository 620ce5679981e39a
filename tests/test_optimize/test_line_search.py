import numpy as np
import pytest

from cgtrain.optimize.line_search import (
    BacktrackingTrainingRate,
    FixedTrainingRate,
    GoldenSectionTrainingRate,
    backtracking_armijo,
    golden_section,
)


def quadratic_fun(x: np.ndarray) -> float:
    return float(x.T @ x)


def quadratic_grad(x: np.ndarray) -> np.ndarray:
    return 2 * x


def test_backtracking_armijo_monotone():
    x = np.array([1.0, -2.0])
    grad = quadratic_grad(x)
    direction = -grad
    phi0 = quadratic_fun(x)
    alpha, value, nevals = backtracking_armijo(
        lambda a: quadratic_fun(x + a * direction), phi0, float(grad @ direction)
    )
    assert 0 < alpha <= 1.0
    assert value == pytest.approx(quadratic_fun(x + alpha * direction))
    assert value <= phi0 + 1e-4 * alpha * (grad @ direction)
    assert nevals > 0


def test_backtracking_armijo_raises_on_invalid_params():
    phi = lambda a: a  # noqa: E731
    with pytest.raises(ValueError):
        backtracking_armijo(phi, 0.0, -1.0, c=1.5)
    with pytest.raises(ValueError):
        backtracking_armijo(phi, 0.0, -1.0, rho=1.1)


def test_backtracking_reports_failure_on_ascent_direction():
    x = np.array([1.0, 1.0])
    direction = quadratic_grad(x)
    alpha, value, _ = backtracking_armijo(
        lambda a: quadratic_fun(x + a * direction), quadratic_fun(x), float(direction @ direction), max_iter=10
    )
    assert alpha == 0.0
    assert value == quadratic_fun(x)


def test_golden_section_finds_exact_step_on_quadratic():
    # phi(a) = (1 - a)^2 is minimized at a = 1
    phi = lambda a: (1.0 - a) ** 2  # noqa: E731
    alpha, value, _ = golden_section(phi, phi(0.0), alpha0=0.01, tolerance=1e-8)
    assert alpha == pytest.approx(1.0, abs=1e-4)
    assert value < 1e-8


def test_golden_section_shrinks_large_initial_step():
    phi = lambda a: (0.1 - a) ** 2  # noqa: E731
    alpha, value, _ = golden_section(phi, phi(0.0), alpha0=5.0, tolerance=1e-8)
    assert alpha == pytest.approx(0.1, abs=1e-4)
    assert value < phi(0.0)


def test_golden_section_returns_zero_without_decrease():
    phi = lambda a: 1.0 + a  # noqa: E731
    alpha, value, _ = golden_section(phi, phi(0.0), alpha0=1.0)
    assert alpha == 0.0
    assert value == 1.0


def test_golden_section_invalid_parameters():
    with pytest.raises(ValueError):
        golden_section(lambda a: a, 0.0, bracketing_factor=1.0)
    with pytest.raises(ValueError):
        golden_section(lambda a: a, 0.0, tolerance=0.0)


@pytest.mark.parametrize(
    "algorithm",
    [FixedTrainingRate(0.25), BacktrackingTrainingRate(), GoldenSectionTrainingRate()],
)
def test_training_rate_algorithms_decrease_quadratic(algorithm):
    x = np.array([1.0, -2.0])
    grad = quadratic_grad(x)
    direction = -grad
    performance = quadratic_fun(x)
    rate, new_performance = algorithm.search(
        quadratic_fun, x, direction, performance, slope=float(grad @ direction)
    )
    assert rate > 0
    assert new_performance == pytest.approx(quadratic_fun(x + rate * direction))
    assert new_performance < performance


def test_golden_section_uses_initial_rate_hint():
    calls = []

    def objective(x: np.ndarray) -> float:
        calls.append(float(x[0]))
        return float((x[0] - 2.0) ** 2)

    algorithm = GoldenSectionTrainingRate(first_rate=1e-3)
    algorithm.search(objective, np.array([0.0]), np.array([1.0]), 4.0, initial_rate=1.5)
    assert calls[0] == pytest.approx(1.5)


def test_direction_shape_mismatch():
    with pytest.raises(ValueError):
        FixedTrainingRate().search(quadratic_fun, np.ones(2), np.ones(3), 2.0)
