import numpy as np
import pytest

from cgtrain.optimize import (
    BacktrackingTrainingRate,
    ConjugateGradient,
    ConjugateGradientConfig,
    Problem,
    StoppingCriteria,
    conjugate_gradient,
)


def himmelblau(x: np.ndarray) -> float:
    return (x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2


def himmelblau_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            4 * x[0] * (x[0] ** 2 + x[1] - 11) + 2 * (x[0] + x[1] ** 2 - 7),
            2 * (x[0] ** 2 + x[1] - 11) + 4 * x[1] * (x[0] + x[1] ** 2 - 7),
        ]
    )


@pytest.mark.parametrize("method", ["PR", "FR"])
def test_quadratic_matches_linear_solve(quadratic_problem, method):
    A = np.array([[4.0, 1.0], [1.0, 3.0]])
    b = np.array([1.0, 2.0])
    res = conjugate_gradient(quadratic_problem, method=method, maxiter=200)
    assert res.success
    assert np.allclose(res.final_parameters, np.linalg.solve(A, b), atol=1e-5)
    assert np.allclose(quadratic_problem.parameters, res.final_parameters)


def test_rosenbrock_polak_ribiere(rosenbrock_problem):
    res = conjugate_gradient(rosenbrock_problem, method="PR", maxiter=1000)
    assert res.success
    assert res.final_performance < 1e-4
    assert np.allclose(res.final_parameters, np.ones(2), atol=1e-2)


def test_himmelblau_minimum_found():
    problem = Problem(fun=himmelblau, grad=himmelblau_grad, parameters=np.array([3.5, 2.5]))
    res = conjugate_gradient(problem, maxiter=500)
    assert res.success
    assert np.allclose(res.final_parameters, np.array([3.0, 2.0]), atol=1e-4)


def test_backtracking_line_search_decreases_rosenbrock(rosenbrock_problem):
    config = ConjugateGradientConfig(display=False, stopping=StoppingCriteria(maximum_iterations_number=200))
    optimizer = ConjugateGradient(rosenbrock_problem, BacktrackingTrainingRate(), config)
    res = optimizer.perform_training()
    assert res.success
    assert res.final_performance < 24.2
    assert np.all(np.diff(res.history.performance) <= 0)


def test_numerical_gradient_fallback(quadratic_problem):
    problem = Problem(fun=quadratic_problem.fun, parameters=np.array([3.0, -1.0]))
    res = conjugate_gradient(problem, tol=1e-6, maxiter=200)
    assert res.success
    assert np.allclose(res.final_parameters, np.linalg.solve([[4.0, 1.0], [1.0, 3.0]], [1.0, 2.0]), atol=1e-4)
    assert problem.njev == 0
    assert problem.nfev > 0


def test_callback_and_history(quadratic_problem):
    reports = []
    res = conjugate_gradient(quadratic_problem, x0=np.zeros(2), history=True, callback=reports.append)
    assert [r.iteration for r in reports] == list(range(res.iterations_number + 1))
    assert len(res.history.parameters) == res.iterations_number + 1
    assert np.array_equal(res.history.parameters[0], np.zeros(2))
