"""Results of a conjugate gradient training run and their text rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np

from .core import Array, StoppingReason
from .history import TrainingHistory

if TYPE_CHECKING:
    from .conjugate_gradient import ConjugateGradientConfig


@dataclass(frozen=True)
class ConjugateGradientResults:
    """
    Final state of a training run plus the reserved histories.

    Attributes:
        final_parameters: Parameters after the last stable iteration.
        final_parameters_norm: Norm of ``final_parameters``.
        final_performance: Performance at ``final_parameters``.
        final_selection_performance: Selection performance, if available.
        final_gradient: Gradient at ``final_parameters``.
        final_gradient_norm: Norm of ``final_gradient``.
        final_training_direction: Last direction computed.
        final_training_rate: Last accepted training rate (0 before any step).
        elapsed_time: Wall-clock seconds spent in training.
        iterations_number: Number of completed iterations.
        stopping_reason: Why the run ended.
        history: Reserved histories trimmed to ``iterations_number + 1`` rows.
    """

    final_parameters: Array
    final_parameters_norm: float
    final_performance: float
    final_selection_performance: Optional[float]
    final_gradient: Array
    final_gradient_norm: float
    final_training_direction: Array
    final_training_rate: float
    elapsed_time: float
    iterations_number: int
    stopping_reason: StoppingReason
    history: TrainingHistory = field(default_factory=TrainingHistory)

    @property
    def success(self) -> bool:
        """False when the run was ended by an error threshold."""
        return not self.stopping_reason.is_error

    @property
    def message(self) -> str:
        return self.stopping_reason.message

    def to_string(self) -> str:
        """Render every reserved history, one block per quantity."""
        lines: List[str] = []
        labels = {
            "parameters": "Parameters history",
            "parameters_norm": "Parameters norm history",
            "performance": "Performance history",
            "selection_performance": "Selection performance history",
            "gradient": "Gradient history",
            "gradient_norm": "Gradient norm history",
            "training_direction": "Training direction history",
            "training_rate": "Training rate history",
            "elapsed_time": "Elapsed time history",
        }
        for name, values in self.history.reserved().items():
            lines.append(f"% {labels[name]}:")
            if values.ndim == 1:
                lines.append(" ".join(_format_number(v) for v in values))
            else:
                lines.extend(" ".join(_format_number(v) for v in row) for row in values)
        lines.append(f"% Stopping reason: {self.message}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()


def _format_number(value: float, precision: int = 6) -> str:
    if np.isnan(value):
        return "nan"
    return f"{value:.{precision}g}"


def write_final_results(
    results: ConjugateGradientResults,
    config: "ConjugateGradientConfig",
    precision: int = 3,
) -> List[Tuple[str, str]]:
    """Summarize a run as (name, value) rows.

    The configuration is passed in explicitly so the results object never
    needs a reference back to its optimizer.
    """
    rows: List[Tuple[str, str]] = [
        ("Training direction method", config.training_direction_method.value),
        ("Final parameters norm", _format_number(results.final_parameters_norm, precision)),
        ("Final performance", _format_number(results.final_performance, precision)),
    ]
    if results.final_selection_performance is not None:
        rows.append(
            ("Final selection performance", _format_number(results.final_selection_performance, precision))
        )
    rows.extend(
        [
            ("Final gradient norm", _format_number(results.final_gradient_norm, precision)),
            ("Final training rate", _format_number(results.final_training_rate, precision)),
            (
                "Iterations number",
                f"{results.iterations_number}/{config.stopping.maximum_iterations_number}",
            ),
            ("Elapsed time", f"{results.elapsed_time:.{precision}f}s"),
            ("Stopping criterion", results.message),
        ]
    )
    return rows


def format_final_results(
    results: ConjugateGradientResults,
    config: "ConjugateGradientConfig",
    precision: int = 3,
) -> str:
    """Aligned two-column text table of :func:`write_final_results`."""
    rows = write_final_results(results, config, precision)
    width = max(len(name) for name, _ in rows)
    return "\n".join(f"{name.ljust(width)}  {value}" for name, value in rows)


__all__ = [
    "ConjugateGradientResults",
    "format_final_results",
    "write_final_results",
]
