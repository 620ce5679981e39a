import pytest

from cgtrain.optimize import (
    ConfigurationError,
    IterationState,
    StoppingCriteria,
    StoppingReason,
    evaluate_stopping_criteria,
)
from cgtrain.optimize.stopping import update_selection_decreases


def _state(**overrides):
    values = dict(
        iteration=5,
        performance=1.0,
        gradient_norm=1.0,
        elapsed_time=0.1,
        previous_performance=2.0,
        parameters_increment_norm=1.0,
        selection_decreases=0,
    )
    values.update(overrides)
    return IterationState(**values)


def test_no_criterion_keeps_training():
    assert evaluate_stopping_criteria(_state(), StoppingCriteria()) is None


@pytest.mark.parametrize(
    "overrides, criteria, expected",
    [
        ({"gradient_norm": 1e-3}, {"gradient_norm_goal": 1e-2}, StoppingReason.GRADIENT_NORM_GOAL_REACHED),
        ({"performance": -1.0}, {"performance_goal": 0.0}, StoppingReason.PERFORMANCE_GOAL_REACHED),
        (
            {"parameters_increment_norm": 1e-9},
            {"minimum_parameters_increment_norm": 1e-6},
            StoppingReason.MINIMUM_PARAMETER_INCREMENT_REACHED,
        ),
        (
            {"previous_performance": 1.0 + 1e-9},
            {"minimum_performance_increase": 1e-6},
            StoppingReason.MINIMUM_PERFORMANCE_INCREASE_REACHED,
        ),
        (
            {"selection_decreases": 3},
            {"maximum_selection_performance_decreases": 3},
            StoppingReason.EARLY_STOPPING_ON_SELECTION,
        ),
        ({"elapsed_time": 10.0}, {"maximum_time": 5.0}, StoppingReason.MAXIMUM_TIME_REACHED),
        ({"iteration": 50}, {"maximum_iterations_number": 50}, StoppingReason.MAXIMUM_ITERATIONS_REACHED),
    ],
)
def test_each_criterion(overrides, criteria, expected):
    assert evaluate_stopping_criteria(_state(**overrides), StoppingCriteria(**criteria)) is expected


def test_priority_order_first_match_wins():
    state = _state(gradient_norm=0.0, performance=-5.0, iteration=100)
    criteria = StoppingCriteria(performance_goal=0.0, maximum_iterations_number=10)
    assert evaluate_stopping_criteria(state, criteria) is StoppingReason.GRADIENT_NORM_GOAL_REACHED

    state = _state(performance=-5.0, iteration=100)
    assert evaluate_stopping_criteria(state, criteria) is StoppingReason.PERFORMANCE_GOAL_REACHED


def test_initial_state_skips_step_based_criteria():
    state = IterationState(iteration=0, performance=1.0, gradient_norm=1.0, elapsed_time=0.0)
    criteria = StoppingCriteria(minimum_parameters_increment_norm=10.0, minimum_performance_increase=10.0)
    assert evaluate_stopping_criteria(state, criteria) is None


def test_selection_criterion_inactive_without_metric():
    state = _state(selection_decreases=None)
    criteria = StoppingCriteria(maximum_selection_performance_decreases=0)
    assert evaluate_stopping_criteria(state, criteria) is None


def test_update_selection_decreases_counts_and_resets():
    count = 0
    count = update_selection_decreases(count, 1.0, 1.1)
    count = update_selection_decreases(count, 1.1, 1.1)
    assert count == 2
    assert update_selection_decreases(count, 1.1, 0.9) == 0
    assert update_selection_decreases(4, None, 1.0) == 0


def test_invalid_criteria_rejected():
    with pytest.raises(ConfigurationError):
        StoppingCriteria(maximum_time=0.0)
    with pytest.raises(ConfigurationError):
        StoppingCriteria(maximum_iterations_number=-1)
    criteria = StoppingCriteria()
    criteria.gradient_norm_goal = -1.0
    with pytest.raises(ConfigurationError):
        criteria.validate()
