"""Conjugate gradient training algorithm.

Example
-------
>>> import numpy as np
>>> from cgtrain.optimize import Problem, conjugate_gradient
>>> A = np.array([[3.0, 1.0], [1.0, 2.0]])
>>> problem = Problem(fun=lambda x: 0.5 * x @ A @ x, grad=lambda x: A @ x,
...                   parameters=np.array([1.0, -1.0]))
>>> res = conjugate_gradient(problem, tol=1e-8)
>>> res.success
True
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..logging import LoggingReporter, ProgressReport, get_logger
from .core import (
    Array,
    ConfigurationError,
    PerformanceFunctional,
    StoppingReason,
    TrainingDirectionMethod,
    TrainingRateAlgorithm,
)
from .direction import gradient_descent_direction, select_direction_update
from .history import HistoryRecorder, HistoryReservation
from .line_search import GoldenSectionTrainingRate
from .results import ConjugateGradientResults
from .stopping import (
    IterationState,
    StoppingCriteria,
    evaluate_stopping_criteria,
    update_selection_decreases,
)
from .utils import vector_norm

logger = get_logger(__name__)

Reporter = Callable[[ProgressReport], None]
Checkpointer = Callable[[Array, int], None]

TRAINING_ALGORITHM_TYPE = "CONJUGATE_GRADIENT"


@dataclass
class Thresholds:
    """
    Warning and error bounds checked every iteration.

    Norm thresholds are upper bounds. Training rate thresholds are lower
    bounds: a rate below ``warning_training_rate`` is reported, a rate below
    ``error_training_rate`` means the line search failed to bracket a
    minimum and ends the run.
    """

    warning_parameters_norm: float = 1.0e6
    warning_gradient_norm: float = 1.0e6
    warning_training_rate: float = 1.0e-12
    error_parameters_norm: float = 1.0e9
    error_gradient_norm: float = 1.0e9
    error_training_rate: float = 0.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in (
            "warning_parameters_norm",
            "warning_gradient_norm",
            "warning_training_rate",
            "error_parameters_norm",
            "error_gradient_norm",
            "error_training_rate",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0")
        if self.warning_parameters_norm > self.error_parameters_norm:
            raise ConfigurationError("warning_parameters_norm must not exceed error_parameters_norm")
        if self.warning_gradient_norm > self.error_gradient_norm:
            raise ConfigurationError("warning_gradient_norm must not exceed error_gradient_norm")
        if self.error_training_rate > self.warning_training_rate:
            raise ConfigurationError("error_training_rate must not exceed warning_training_rate")


@dataclass
class ConjugateGradientConfig:
    """Everything that parameterizes a run; never changed by training."""

    training_direction_method: TrainingDirectionMethod = TrainingDirectionMethod.PR
    thresholds: Thresholds = field(default_factory=Thresholds)
    stopping: StoppingCriteria = field(default_factory=StoppingCriteria)
    reservation: HistoryReservation = field(default_factory=HistoryReservation)
    display: bool = True
    display_period: int = 10
    save_period: int = 0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        self.training_direction_method = TrainingDirectionMethod.parse(self.training_direction_method)
        self.thresholds.validate()
        self.stopping.validate()
        if self.display_period < 1:
            raise ConfigurationError("display_period must be >= 1")
        if self.save_period < 0:
            raise ConfigurationError("save_period must be >= 0")


def _replace_validated(section, values):
    try:
        return replace(section, **values)
    except TypeError as e:
        raise ConfigurationError(str(e)) from e


class ConjugateGradient:
    """
    Trains the parameters of a performance functional by nonlinear
    conjugate gradient.

    Each iteration asks the training-rate algorithm for a step along the
    current direction, moves the parameters, evaluates the new gradient and
    builds the next direction with the Polak-Ribiere or Fletcher-Reeves
    coefficient. Warning thresholds are logged; error thresholds end the run
    and the results describe the last stable iteration.

    Args:
        performance_functional: Objective and model to train.
        training_rate_algorithm: Line search; golden section by default.
        config: Run configuration; defaults are used when omitted.
        reporter: Receives a :class:`ProgressReport` every display period.
        checkpointer: Called with ``(parameters, iteration)`` every save
            period. Its failures are logged and ignored.
    """

    def __init__(
        self,
        performance_functional: Optional[PerformanceFunctional] = None,
        training_rate_algorithm: Optional[TrainingRateAlgorithm] = None,
        config: Optional[ConjugateGradientConfig] = None,
        reporter: Optional[Reporter] = None,
        checkpointer: Optional[Checkpointer] = None,
    ) -> None:
        self.performance_functional = performance_functional
        self.training_rate_algorithm = training_rate_algorithm or GoldenSectionTrainingRate()
        self.config = config or ConjugateGradientConfig()
        self.reporter = reporter or LoggingReporter()
        self.checkpointer = checkpointer

    def set_performance_functional(self, performance_functional: PerformanceFunctional) -> None:
        self.performance_functional = performance_functional

    def set_training_direction_method(self, method: TrainingDirectionMethod | str) -> None:
        self.config.training_direction_method = TrainingDirectionMethod.parse(method)

    def set_reserve_all_training_history(self, enabled: bool) -> None:
        self.config.reservation.set_all(enabled)

    def set_thresholds(self, **values: float) -> None:
        """Update warning and error thresholds, e.g. ``set_thresholds(error_gradient_norm=1e3)``.

        The new values are validated together; on error nothing changes.
        """
        self.config.thresholds = _replace_validated(self.config.thresholds, values)

    def set_stopping_criteria(self, **values: float) -> None:
        """Update stopping criteria by name; validated like :meth:`set_thresholds`."""
        self.config.stopping = _replace_validated(self.config.stopping, values)

    def set_display_period(self, display_period: int) -> None:
        if display_period < 1:
            raise ConfigurationError("display_period must be >= 1")
        self.config.display_period = int(display_period)

    def set_save_period(self, save_period: int) -> None:
        if save_period < 0:
            raise ConfigurationError("save_period must be >= 0")
        self.config.save_period = int(save_period)

    def write_training_algorithm_type(self) -> str:
        return TRAINING_ALGORITHM_TYPE

    def config_rows(self) -> List[Tuple[str, str]]:
        """Configuration as (name, value) rows for display."""
        from ..io.config_xml import config_to_dict

        return [(name, str(value)) for name, value in config_to_dict(self.config).items()]

    def to_xml(self) -> str:
        from ..io.config_xml import config_to_xml

        return config_to_xml(self.config)

    def from_xml(self, document: str) -> None:
        from ..io.config_xml import config_from_xml

        self.config = config_from_xml(document)

    def calculate_training_direction(self, old_gradient: Array, gradient: Array, old_direction: Array) -> Array:
        update = select_direction_update(self.config.training_direction_method)
        return update(old_gradient, gradient, old_direction)

    def _check_norms(self, parameters_norm: float, gradient_norm: float) -> Optional[StoppingReason]:
        thresholds = self.config.thresholds
        if not np.isfinite(parameters_norm) or parameters_norm >= thresholds.error_parameters_norm:
            logger.error("Parameters norm %.6g exceeds error threshold %.6g.", parameters_norm, thresholds.error_parameters_norm)
            return StoppingReason.PARAMETERS_NORM_ERROR
        if not np.isfinite(gradient_norm) or gradient_norm >= thresholds.error_gradient_norm:
            logger.error("Gradient norm %.6g exceeds error threshold %.6g.", gradient_norm, thresholds.error_gradient_norm)
            return StoppingReason.GRADIENT_NORM_ERROR
        if parameters_norm >= thresholds.warning_parameters_norm:
            logger.warning("Parameters norm is %.6g.", parameters_norm)
        if gradient_norm >= thresholds.warning_gradient_norm:
            logger.warning("Gradient norm is %.6g.", gradient_norm)
        return None

    def _check_rate(self, rate: float) -> Optional[StoppingReason]:
        thresholds = self.config.thresholds
        if not np.isfinite(rate):
            logger.error("Training rate %s is not finite.", rate)
            return StoppingReason.TRAINING_RATE_ERROR
        if rate < thresholds.error_training_rate:
            logger.error(
                "Training rate %.6g is below error threshold %.6g: unable to bracket a minimum.",
                rate,
                thresholds.error_training_rate,
            )
            return StoppingReason.TRAINING_RATE_ERROR
        if rate < thresholds.warning_training_rate:
            logger.warning("Training rate is %.6g.", rate)
        return None

    def _emit(self, iteration: int, report: ProgressReport, parameters: Array, final: bool) -> None:
        config = self.config
        if config.display and (final or iteration % config.display_period == 0):
            self.reporter(report)
        if self.checkpointer is not None and config.save_period > 0 and iteration > 0 and iteration % config.save_period == 0:
            try:
                self.checkpointer(parameters.copy(), iteration)
            except Exception as exc:
                logger.warning("Checkpoint at iteration %d failed: %s", iteration, exc)

    def perform_training(self) -> ConjugateGradientResults:
        """Run the training loop until a stopping criterion or an error fires.

        Returns:
            ConjugateGradientResults describing the last stable iteration.

        Raises:
            ConfigurationError: If no performance functional is attached or
                the configuration is invalid.
        """
        functional = self.performance_functional
        if functional is None:
            raise ConfigurationError("No performance functional attached to the conjugate gradient object.")
        config = self.config
        config.validate()
        criteria = config.stopping
        update = select_direction_update(config.training_direction_method)
        search = self.training_rate_algorithm.search

        start = time.perf_counter()

        parameters = np.asarray(functional.get_parameters(), dtype=float).copy()
        performance = float(functional.evaluate(parameters))
        gradient = np.asarray(functional.gradient(parameters), dtype=float)
        if gradient.shape != parameters.shape:
            raise ValueError(
                f"gradient shape {gradient.shape} does not match parameters {parameters.shape}"
            )
        selection = functional.selection_performance(parameters)
        selection_decreases: Optional[int] = None if selection is None else 0
        parameters_norm = vector_norm(parameters)
        gradient_norm = vector_norm(gradient)
        direction = gradient_descent_direction(gradient)
        rate = 0.0
        iteration = 0

        recorder = HistoryRecorder(config.reservation, parameters.size, criteria.maximum_iterations_number)

        def record() -> None:
            recorder.record(
                parameters=parameters,
                parameters_norm=parameters_norm,
                performance=performance,
                selection_performance=selection,
                gradient=gradient,
                gradient_norm=gradient_norm,
                training_direction=direction,
                training_rate=rate,
                elapsed_time=elapsed_time,
            )

        def report() -> ProgressReport:
            return ProgressReport(
                iteration=iteration,
                performance=performance,
                gradient_norm=gradient_norm,
                training_rate=rate,
                elapsed_time=elapsed_time,
                selection_performance=selection,
            )

        aborted = False
        elapsed_time = time.perf_counter() - start
        reason = self._check_norms(parameters_norm, gradient_norm)
        if reason is None:
            reason = evaluate_stopping_criteria(
                IterationState(
                    iteration=0,
                    performance=performance,
                    gradient_norm=gradient_norm,
                    elapsed_time=elapsed_time,
                    selection_decreases=selection_decreases,
                ),
                criteria,
            )
        record()
        self._emit(iteration, report(), parameters, final=reason is not None)

        while reason is None:
            current = iteration + 1
            slope = float(np.dot(gradient, direction))
            new_rate, new_performance = search(
                functional.evaluate,
                parameters,
                direction,
                performance,
                initial_rate=rate if rate > 0 else None,
                slope=slope,
            )
            new_rate = float(new_rate)
            reason = self._check_rate(new_rate)
            if reason is not None:
                functional.set_parameters(parameters)
                aborted = True
                break

            increment = new_rate * direction
            new_parameters = parameters + increment
            functional.set_parameters(new_parameters)
            new_gradient = np.asarray(functional.gradient(new_parameters), dtype=float)
            new_parameters_norm = vector_norm(new_parameters)
            new_gradient_norm = vector_norm(new_gradient)

            reason = self._check_norms(new_parameters_norm, new_gradient_norm)
            if reason is not None:
                functional.set_parameters(parameters)
                aborted = True
                break

            new_selection = functional.selection_performance(new_parameters)
            if selection_decreases is not None:
                selection_decreases = update_selection_decreases(selection_decreases, selection, new_selection)

            new_direction = update(gradient, new_gradient, direction)
            if float(np.dot(new_gradient, new_direction)) >= 0.0:
                logger.debug("Iteration %d: not a descent direction, restarting along the gradient.", current)
                new_direction = gradient_descent_direction(new_gradient)

            elapsed_time = time.perf_counter() - start
            reason = evaluate_stopping_criteria(
                IterationState(
                    iteration=current,
                    performance=float(new_performance),
                    gradient_norm=new_gradient_norm,
                    elapsed_time=elapsed_time,
                    previous_performance=performance,
                    parameters_increment_norm=vector_norm(increment),
                    selection_decreases=selection_decreases,
                ),
                criteria,
            )

            iteration = current
            parameters = new_parameters
            parameters_norm = new_parameters_norm
            performance = float(new_performance)
            selection = new_selection
            gradient = new_gradient
            gradient_norm = new_gradient_norm
            direction = new_direction
            rate = new_rate

            record()
            self._emit(iteration, report(), parameters, final=reason is not None)

        elapsed_time = time.perf_counter() - start
        if aborted and config.display and iteration % config.display_period != 0:
            self.reporter(report())
        if reason.is_error:
            logger.error("Training failed after %d iterations: %s", iteration, reason.message)
        else:
            logger.info("Training stopped after %d iterations: %s", iteration, reason.message)

        return ConjugateGradientResults(
            final_parameters=parameters.copy(),
            final_parameters_norm=parameters_norm,
            final_performance=performance,
            final_selection_performance=selection,
            final_gradient=gradient.copy(),
            final_gradient_norm=gradient_norm,
            final_training_direction=direction.copy(),
            final_training_rate=rate,
            elapsed_time=elapsed_time,
            iterations_number=iteration,
            stopping_reason=reason,
            history=recorder.snapshot(),
        )


def conjugate_gradient(
    problem: PerformanceFunctional,
    x0: Optional[Array] = None,
    method: TrainingDirectionMethod | str = TrainingDirectionMethod.PR,
    maxiter: int = 1000,
    tol: float = 1e-8,
    line_search: Optional[TrainingRateAlgorithm] = None,
    history: bool = False,
    callback: Optional[Reporter] = None,
) -> ConjugateGradientResults:
    """Minimize ``problem`` with default thresholds and a gradient tolerance.

    ``callback`` receives a progress report after every iteration and
    ``history=True`` reserves every history quantity.
    """
    if x0 is not None:
        problem.set_parameters(np.asarray(x0, dtype=float))
    config = ConjugateGradientConfig(
        training_direction_method=TrainingDirectionMethod.parse(method),
        stopping=StoppingCriteria(gradient_norm_goal=tol, maximum_iterations_number=maxiter),
        display=callback is not None,
        display_period=1,
    )
    if history:
        config.reservation.set_all(True)
    optimizer = ConjugateGradient(problem, line_search, config, reporter=callback)
    return optimizer.perform_training()


__all__ = [
    "Checkpointer",
    "ConjugateGradient",
    "ConjugateGradientConfig",
    "Reporter",
    "TRAINING_ALGORITHM_TYPE",
    "Thresholds",
    "conjugate_gradient",
]
