"""PyTorch integration for cgtrain."""

from .functional import LossFn, ModulePerformanceFunctional

__all__ = ["LossFn", "ModulePerformanceFunctional"]
