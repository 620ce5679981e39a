"""Core interfaces shared by the conjugate gradient training modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

from .utils import approx_grad

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]


class ConfigurationError(ValueError):
    """Raised when an optimizer is misconfigured before training starts."""


class TrainingDirectionMethod(Enum):
    """Formula used for the conjugate gradient coefficient."""

    PR = "PR"
    FR = "FR"

    @classmethod
    def parse(cls, value: "TrainingDirectionMethod | str") -> "TrainingDirectionMethod":
        """Return the method named by ``value``.

        Accepts the enum itself, the short names ``"PR"``/``"FR"`` and the
        long names ``"PolakRibiere"``/``"FletcherReeves"`` in any case.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().replace("-", "").replace("_", "").upper()
        aliases = {
            "PR": cls.PR,
            "POLAKRIBIERE": cls.PR,
            "FR": cls.FR,
            "FLETCHERREEVES": cls.FR,
        }
        if key not in aliases:
            raise ConfigurationError(f"Unknown training direction method: {value!r}")
        return aliases[key]


class StoppingReason(Enum):
    """Why a training run terminated."""

    GRADIENT_NORM_GOAL_REACHED = "gradient_norm_goal_reached"
    PERFORMANCE_GOAL_REACHED = "performance_goal_reached"
    MINIMUM_PARAMETER_INCREMENT_REACHED = "minimum_parameter_increment_reached"
    MINIMUM_PERFORMANCE_INCREASE_REACHED = "minimum_performance_increase_reached"
    EARLY_STOPPING_ON_SELECTION = "early_stopping_on_selection"
    MAXIMUM_TIME_REACHED = "maximum_time_reached"
    MAXIMUM_ITERATIONS_REACHED = "maximum_iterations_reached"
    PARAMETERS_NORM_ERROR = "parameters_norm_error"
    GRADIENT_NORM_ERROR = "gradient_norm_error"
    TRAINING_RATE_ERROR = "training_rate_error"

    @property
    def is_error(self) -> bool:
        """True for reasons produced by crossing an error threshold."""
        return self in _ERROR_REASONS

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_ERROR_REASONS = frozenset(
    {
        StoppingReason.PARAMETERS_NORM_ERROR,
        StoppingReason.GRADIENT_NORM_ERROR,
        StoppingReason.TRAINING_RATE_ERROR,
    }
)

_MESSAGES = {
    StoppingReason.GRADIENT_NORM_GOAL_REACHED: "Gradient norm goal reached.",
    StoppingReason.PERFORMANCE_GOAL_REACHED: "Performance goal reached.",
    StoppingReason.MINIMUM_PARAMETER_INCREMENT_REACHED: "Minimum parameters increment norm reached.",
    StoppingReason.MINIMUM_PERFORMANCE_INCREASE_REACHED: "Minimum performance increase reached.",
    StoppingReason.EARLY_STOPPING_ON_SELECTION: "Maximum selection performance decreases reached.",
    StoppingReason.MAXIMUM_TIME_REACHED: "Maximum training time reached.",
    StoppingReason.MAXIMUM_ITERATIONS_REACHED: "Maximum number of iterations reached.",
    StoppingReason.PARAMETERS_NORM_ERROR: "Parameters norm exceeded the error threshold.",
    StoppingReason.GRADIENT_NORM_ERROR: "Gradient norm exceeded the error threshold.",
    StoppingReason.TRAINING_RATE_ERROR: "Line search could not bracket a minimum.",
}


@runtime_checkable
class PerformanceFunctional(Protocol):
    """Objective being minimized together with the model it reads from."""

    def get_parameters(self) -> Array:
        ...

    def set_parameters(self, parameters: Array) -> None:
        ...

    def evaluate(self, parameters: Array) -> float:
        ...

    def gradient(self, parameters: Array) -> Array:
        ...

    def selection_performance(self, parameters: Array) -> Optional[float]:
        ...


class TrainingRateAlgorithm(Protocol):
    """One-dimensional minimization along a training direction."""

    def search(
        self,
        objective: Objective,
        parameters: Array,
        direction: Array,
        performance: float,
        *,
        initial_rate: Optional[float] = None,
        slope: Optional[float] = None,
    ) -> Tuple[float, float]:
        ...


@dataclass
class Problem:
    """Performance functional built from plain numpy callables.

    ``grad`` falls back to central differences when omitted and
    ``selection_fun`` enables early stopping on a held-out metric.
    ``parameters`` holds the model state that training reads and writes.
    """

    fun: Objective
    grad: Optional[Gradient] = None
    selection_fun: Optional[Objective] = None
    dim: Optional[int] = None
    parameters: Optional[Array] = None
    nfev: int = field(default=0, init=False)
    njev: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.parameters is None:
            if self.dim is None:
                raise ValueError("Problem needs either dim or initial parameters.")
            self.parameters = np.zeros(self.dim, dtype=float)
        else:
            self.parameters = np.asarray(self.parameters, dtype=float).copy()
            if self.dim is None:
                self.dim = int(self.parameters.size)
            elif self.parameters.size != self.dim:
                raise ValueError(
                    f"parameters length {self.parameters.size} does not match dim {self.dim}"
                )

    def get_parameters(self) -> Array:
        return self.parameters.copy()

    def set_parameters(self, parameters: Array) -> None:
        parameters = np.asarray(parameters, dtype=float)
        if parameters.shape != self.parameters.shape:
            raise ValueError(
                f"parameters shape {parameters.shape} does not match {self.parameters.shape}"
            )
        self.parameters = parameters.copy()

    def evaluate(self, parameters: Array) -> float:
        self.nfev += 1
        return float(self.fun(parameters))

    def gradient(self, parameters: Array) -> Array:
        if self.grad is not None:
            self.njev += 1
            return np.asarray(self.grad(parameters), dtype=float)
        grad, evals = approx_grad(self.fun, parameters, return_evals=True)
        self.nfev += int(evals)
        return grad

    def selection_performance(self, parameters: Array) -> Optional[float]:
        if self.selection_fun is None:
            return None
        return float(self.selection_fun(parameters))


__all__ = [
    "Array",
    "ConfigurationError",
    "Gradient",
    "Objective",
    "PerformanceFunctional",
    "Problem",
    "StoppingReason",
    "TrainingDirectionMethod",
    "TrainingRateAlgorithm",
]
