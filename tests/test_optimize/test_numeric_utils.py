import numpy as np
import pytest

from cgtrain.optimize import Problem
from cgtrain.optimize.utils import approx_grad, vector_norm


def test_approx_grad_matches_linear_function():
    def fun(x: np.ndarray) -> float:
        return float(3 * x[0] - 2 * x[1])

    grad = approx_grad(fun, np.array([0.2, -0.1]))
    assert np.allclose(grad, np.array([3.0, -2.0]), atol=1e-6)


def test_approx_grad_counts_evaluations():
    grad, evals = approx_grad(lambda x: float(x @ x), np.array([1.0, 2.0, 3.0]), return_evals=True)
    assert np.allclose(grad, [2.0, 4.0, 6.0], atol=1e-6)
    assert evals == 6


def test_approx_grad_invalid_eps():
    with pytest.raises(ValueError):
        approx_grad(lambda x: float(x[0]), np.array([0.0]), eps=0.0)


def test_vector_norm_is_float():
    value = vector_norm(np.array([3.0, 4.0]))
    assert isinstance(value, float)
    assert value == 5.0


def test_problem_requires_dimension():
    with pytest.raises(ValueError):
        Problem(fun=lambda x: 0.0)
    with pytest.raises(ValueError):
        Problem(fun=lambda x: 0.0, dim=3, parameters=np.zeros(2))
    assert np.array_equal(Problem(fun=lambda x: 0.0, dim=3).get_parameters(), np.zeros(3))


def test_problem_parameters_are_copied():
    initial = np.array([1.0, 2.0])
    problem = Problem(fun=lambda x: float(x @ x), parameters=initial)
    initial[0] = 10.0
    params = problem.get_parameters()
    params[1] = 20.0
    assert np.array_equal(problem.parameters, [1.0, 2.0])
    with pytest.raises(ValueError):
        problem.set_parameters(np.zeros(3))


def test_problem_selection_performance_optional():
    problem = Problem(fun=lambda x: 0.0, dim=1)
    assert problem.selection_performance(np.zeros(1)) is None
    problem = Problem(fun=lambda x: 0.0, selection_fun=lambda x: 2.5, dim=1)
    assert problem.selection_performance(np.zeros(1)) == 2.5
