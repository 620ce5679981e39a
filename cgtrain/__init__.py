"""cgtrain - nonlinear conjugate gradient training of model parameters."""

__version__ = "0.1.0"

from .logging import LoggingReporter, ProgressReport, configure_logging, get_logger, set_log_level
from .optimize import (
    BacktrackingTrainingRate,
    ConfigurationError,
    ConjugateGradient,
    ConjugateGradientConfig,
    ConjugateGradientResults,
    FixedTrainingRate,
    GoldenSectionTrainingRate,
    HistoryReservation,
    PerformanceFunctional,
    Problem,
    StoppingCriteria,
    StoppingReason,
    Thresholds,
    TrainingDirectionMethod,
    TrainingHistory,
    conjugate_gradient,
    format_final_results,
    write_final_results,
)
from .io import (
    NumpyCheckpointer,
    config_from_xml,
    config_to_xml,
    dump_config_xml,
    load_config_xml,
)

__all__ = [
    "BacktrackingTrainingRate",
    "ConfigurationError",
    "ConjugateGradient",
    "ConjugateGradientConfig",
    "ConjugateGradientResults",
    "FixedTrainingRate",
    "GoldenSectionTrainingRate",
    "HistoryReservation",
    "LoggingReporter",
    "NumpyCheckpointer",
    "PerformanceFunctional",
    "Problem",
    "ProgressReport",
    "StoppingCriteria",
    "StoppingReason",
    "Thresholds",
    "TrainingDirectionMethod",
    "TrainingHistory",
    "config_from_xml",
    "config_to_xml",
    "configure_logging",
    "conjugate_gradient",
    "dump_config_xml",
    "format_final_results",
    "get_logger",
    "load_config_xml",
    "set_log_level",
    "write_final_results",
]
