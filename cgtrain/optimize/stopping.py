"""Stopping criteria for the training loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core import ConfigurationError, StoppingReason


@dataclass
class StoppingCriteria:
    """
    Thresholds that end a training run.

    Attributes:
        minimum_parameters_increment_norm: Stop once the norm of the
            parameter update falls to this value.
        minimum_performance_increase: Stop once the performance decrease
            between two iterations falls to this value.
        performance_goal: Stop once performance reaches this value.
        gradient_norm_goal: Stop once the gradient norm reaches this value.
        maximum_selection_performance_decreases: Stop after this many
            consecutive iterations without selection improvement.
        maximum_iterations_number: Hard limit on iterations.
        maximum_time: Wall-clock limit in seconds, checked between iterations.
    """

    minimum_parameters_increment_norm: float = 0.0
    minimum_performance_increase: float = 0.0
    performance_goal: float = -1.0e99
    gradient_norm_goal: float = 0.0
    maximum_selection_performance_decreases: int = 1_000_000
    maximum_iterations_number: int = 1000
    maximum_time: float = 1000.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError for values no run can honor."""
        if self.minimum_parameters_increment_norm < 0:
            raise ConfigurationError("minimum_parameters_increment_norm must be >= 0")
        if self.minimum_performance_increase < 0:
            raise ConfigurationError("minimum_performance_increase must be >= 0")
        if self.gradient_norm_goal < 0:
            raise ConfigurationError("gradient_norm_goal must be >= 0")
        if self.maximum_selection_performance_decreases < 0:
            raise ConfigurationError("maximum_selection_performance_decreases must be >= 0")
        if self.maximum_iterations_number < 0:
            raise ConfigurationError("maximum_iterations_number must be >= 0")
        if self.maximum_time <= 0:
            raise ConfigurationError("maximum_time must be positive")


@dataclass(frozen=True)
class IterationState:
    """Values the stopping criteria look at after one iteration.

    ``previous_performance`` and ``parameters_increment_norm`` are None for
    the initial state, where no step has been taken yet. A None
    ``selection_decreases`` means no selection metric is available.
    """

    iteration: int
    performance: float
    gradient_norm: float
    elapsed_time: float
    previous_performance: Optional[float] = None
    parameters_increment_norm: Optional[float] = None
    selection_decreases: Optional[int] = None


def evaluate_stopping_criteria(
    state: IterationState, criteria: StoppingCriteria
) -> Optional[StoppingReason]:
    """Return the first satisfied stopping reason, or None to keep training."""
    if state.gradient_norm <= criteria.gradient_norm_goal:
        return StoppingReason.GRADIENT_NORM_GOAL_REACHED
    if state.performance <= criteria.performance_goal:
        return StoppingReason.PERFORMANCE_GOAL_REACHED
    if (
        state.parameters_increment_norm is not None
        and state.parameters_increment_norm <= criteria.minimum_parameters_increment_norm
    ):
        return StoppingReason.MINIMUM_PARAMETER_INCREMENT_REACHED
    if (
        state.previous_performance is not None
        and state.previous_performance - state.performance <= criteria.minimum_performance_increase
    ):
        return StoppingReason.MINIMUM_PERFORMANCE_INCREASE_REACHED
    if (
        state.selection_decreases is not None
        and state.selection_decreases >= criteria.maximum_selection_performance_decreases
    ):
        return StoppingReason.EARLY_STOPPING_ON_SELECTION
    if state.elapsed_time >= criteria.maximum_time:
        return StoppingReason.MAXIMUM_TIME_REACHED
    if state.iteration >= criteria.maximum_iterations_number:
        return StoppingReason.MAXIMUM_ITERATIONS_REACHED
    return None


def update_selection_decreases(
    count: int, previous: Optional[float], current: Optional[float]
) -> int:
    """Advance the consecutive no-improvement counter for selection performance.

    The counter resets to zero on any strict improvement.
    """
    if previous is None or current is None:
        return 0
    if current < previous:
        return 0
    return count + 1


__all__ = [
    "IterationState",
    "StoppingCriteria",
    "evaluate_stopping_criteria",
    "update_selection_decreases",
]
