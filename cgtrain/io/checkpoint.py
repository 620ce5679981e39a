"""Parameter checkpoints written during training."""

from __future__ import annotations

import os
from typing import Tuple

import numpy as np


class NumpyCheckpointer:
    """
    Save the parameter vector to ``.npz`` files every save period.

    ``path`` may contain an ``{iteration}`` placeholder to keep one file per
    checkpoint; otherwise the same file is overwritten.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.saved: list[str] = []

    def __call__(self, parameters: np.ndarray, iteration: int) -> None:
        target = self.path.format(iteration=iteration)
        directory = os.path.dirname(target)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(target, "wb") as f:
            np.savez(f, parameters=np.asarray(parameters, dtype=float), iteration=iteration)
        self.saved.append(target)


def load_checkpoint(path: str) -> Tuple[np.ndarray, int]:
    """Return ``(parameters, iteration)`` stored by :class:`NumpyCheckpointer`."""
    with np.load(path) as data:
        return data["parameters"].copy(), int(data["iteration"])


__all__ = ["NumpyCheckpointer", "load_checkpoint"]
