"""Schema of the persisted conjugate gradient configuration.

Document structure::

    <ConjugateGradient>
        <TrainingDirectionMethod>PR</TrainingDirectionMethod>
        <WarningParametersNorm>1000000</WarningParametersNorm>
        ...
        <ReservePerformanceHistory>1</ReservePerformanceHistory>
        ...
        <DisplayPeriod>10</DisplayPeriod>
        <SavePeriod>0</SavePeriod>
    </ConjugateGradient>

Every field has its own element; each element may be omitted, in which case
the default value is kept.
"""

from __future__ import annotations

from typing import Any, Dict, NamedTuple

ROOT_TAG = "ConjugateGradient"


class FieldSpec(NamedTuple):
    """Where a configuration field lives and how its text is typed."""

    section: str
    name: str
    kind: str


# Tag -> (config section, attribute, kind). Section "" is the top level.
FIELDS: Dict[str, FieldSpec] = {
    "TrainingDirectionMethod": FieldSpec("", "training_direction_method", "method"),
    "WarningParametersNorm": FieldSpec("thresholds", "warning_parameters_norm", "float"),
    "WarningGradientNorm": FieldSpec("thresholds", "warning_gradient_norm", "float"),
    "WarningTrainingRate": FieldSpec("thresholds", "warning_training_rate", "float"),
    "ErrorParametersNorm": FieldSpec("thresholds", "error_parameters_norm", "float"),
    "ErrorGradientNorm": FieldSpec("thresholds", "error_gradient_norm", "float"),
    "ErrorTrainingRate": FieldSpec("thresholds", "error_training_rate", "float"),
    "MinimumParametersIncrementNorm": FieldSpec("stopping", "minimum_parameters_increment_norm", "float"),
    "MinimumPerformanceIncrease": FieldSpec("stopping", "minimum_performance_increase", "float"),
    "PerformanceGoal": FieldSpec("stopping", "performance_goal", "float"),
    "GradientNormGoal": FieldSpec("stopping", "gradient_norm_goal", "float"),
    "MaximumSelectionPerformanceDecreases": FieldSpec(
        "stopping", "maximum_selection_performance_decreases", "int"
    ),
    "MaximumIterationsNumber": FieldSpec("stopping", "maximum_iterations_number", "int"),
    "MaximumTime": FieldSpec("stopping", "maximum_time", "float"),
    "ReserveParametersHistory": FieldSpec("reservation", "parameters", "bool"),
    "ReserveParametersNormHistory": FieldSpec("reservation", "parameters_norm", "bool"),
    "ReservePerformanceHistory": FieldSpec("reservation", "performance", "bool"),
    "ReserveSelectionPerformanceHistory": FieldSpec("reservation", "selection_performance", "bool"),
    "ReserveGradientHistory": FieldSpec("reservation", "gradient", "bool"),
    "ReserveGradientNormHistory": FieldSpec("reservation", "gradient_norm", "bool"),
    "ReserveTrainingDirectionHistory": FieldSpec("reservation", "training_direction", "bool"),
    "ReserveTrainingRateHistory": FieldSpec("reservation", "training_rate", "bool"),
    "ReserveElapsedTimeHistory": FieldSpec("reservation", "elapsed_time", "bool"),
    "Display": FieldSpec("", "display", "bool"),
    "DisplayPeriod": FieldSpec("", "display_period", "int"),
    "SavePeriod": FieldSpec("", "save_period", "int"),
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_value(kind: str, text: str) -> Any:
    """Convert element text to the Python value of ``kind``.

    Raises
    ------
    ValueError
        If the text cannot be read as ``kind``.
    """
    text = text.strip()
    if kind == "float":
        return float(text)
    if kind == "int":
        value = float(text)
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {text!r}")
        return int(value)
    if kind == "bool":
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"expected a boolean, got {text!r}")
    if kind == "method":
        return text
    raise ValueError(f"unknown field kind {kind!r}")


def format_value(kind: str, value: Any) -> str:
    """Text written into the element for ``value``."""
    if kind == "bool":
        return "1" if value else "0"
    if kind == "float":
        return repr(float(value))
    if kind == "int":
        return str(int(value))
    if kind == "method":
        return str(getattr(value, "value", value))
    raise ValueError(f"unknown field kind {kind!r}")


__all__ = ["FIELDS", "FieldSpec", "ROOT_TAG", "format_value", "parse_value"]
