"""Nonlinear conjugate gradient training.

Example
-------
>>> import numpy as np
>>> from cgtrain.optimize import ConjugateGradient, Problem
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, parameters=np.array([-1.2, 1.0]))
>>> optimizer = ConjugateGradient(problem)
>>> optimizer.set_training_direction_method("FR")
>>> results = optimizer.perform_training()
"""

from .conjugate_gradient import (
    ConjugateGradient,
    ConjugateGradientConfig,
    Thresholds,
    conjugate_gradient,
)
from .core import (
    ConfigurationError,
    PerformanceFunctional,
    Problem,
    StoppingReason,
    TrainingDirectionMethod,
    TrainingRateAlgorithm,
)
from .direction import (
    fletcher_reeves_direction,
    fletcher_reeves_parameter,
    gradient_descent_direction,
    polak_ribiere_direction,
    polak_ribiere_parameter,
    select_direction_update,
    training_direction,
)
from .history import HistoryRecorder, HistoryReservation, TrainingHistory
from .line_search import (
    BacktrackingTrainingRate,
    FixedTrainingRate,
    GoldenSectionTrainingRate,
    backtracking_armijo,
    golden_section,
)
from .results import ConjugateGradientResults, format_final_results, write_final_results
from .stopping import IterationState, StoppingCriteria, evaluate_stopping_criteria
from .utils import approx_grad

__all__ = [
    "BacktrackingTrainingRate",
    "ConfigurationError",
    "ConjugateGradient",
    "ConjugateGradientConfig",
    "ConjugateGradientResults",
    "FixedTrainingRate",
    "GoldenSectionTrainingRate",
    "HistoryRecorder",
    "HistoryReservation",
    "IterationState",
    "PerformanceFunctional",
    "Problem",
    "StoppingCriteria",
    "StoppingReason",
    "Thresholds",
    "TrainingDirectionMethod",
    "TrainingHistory",
    "TrainingRateAlgorithm",
    "approx_grad",
    "backtracking_armijo",
    "conjugate_gradient",
    "evaluate_stopping_criteria",
    "fletcher_reeves_direction",
    "fletcher_reeves_parameter",
    "format_final_results",
    "golden_section",
    "gradient_descent_direction",
    "polak_ribiere_direction",
    "polak_ribiere_parameter",
    "select_direction_update",
    "training_direction",
    "write_final_results",
]
