"""Per-iteration training history.

Each of the nine tracked quantities has its own reservation flag. Only
reserved quantities get a buffer; buffers are pre-sized from the iteration
limit, grow on demand and are trimmed to the recorded length when the run
ends.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

import numpy as np

from .core import Array

VECTOR_QUANTITIES = ("parameters", "gradient", "training_direction")
SCALAR_QUANTITIES = (
    "parameters_norm",
    "performance",
    "selection_performance",
    "gradient_norm",
    "training_rate",
    "elapsed_time",
)
QUANTITIES = (
    "parameters",
    "parameters_norm",
    "performance",
    "selection_performance",
    "gradient",
    "gradient_norm",
    "training_direction",
    "training_rate",
    "elapsed_time",
)

# Upper bound on rows allocated up front; longer runs grow the buffer.
_MAX_PRESIZE = 1 << 16


@dataclass
class HistoryReservation:
    """Flags selecting which quantities are recorded every iteration."""

    parameters: bool = False
    parameters_norm: bool = False
    performance: bool = True
    selection_performance: bool = False
    gradient: bool = False
    gradient_norm: bool = True
    training_direction: bool = False
    training_rate: bool = False
    elapsed_time: bool = False

    @classmethod
    def all(cls, enabled: bool = True) -> "HistoryReservation":
        return cls(**{name: enabled for name in QUANTITIES})

    def set_all(self, enabled: bool) -> None:
        for name in QUANTITIES:
            setattr(self, name, bool(enabled))

    def enabled(self) -> tuple[str, ...]:
        return tuple(name for name in QUANTITIES if getattr(self, name))


class _Buffer:
    """Growable numpy-backed sequence of scalars or fixed-width vectors."""

    def __init__(self, capacity: int, width: Optional[int] = None) -> None:
        capacity = max(1, min(capacity, _MAX_PRESIZE))
        shape = (capacity,) if width is None else (capacity, width)
        self._data = np.empty(shape, dtype=float)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def append(self, value: float | Array) -> None:
        if self._size == self._data.shape[0]:
            grown = np.empty((2 * self._size,) + self._data.shape[1:], dtype=float)
            grown[: self._size] = self._data
            self._data = grown
        self._data[self._size] = value
        self._size += 1

    def trimmed(self) -> Array:
        return self._data[: self._size].copy()


@dataclass(frozen=True)
class TrainingHistory:
    """Recorded histories; None for quantities that were not reserved.

    Row ``k`` holds the state after iteration ``k``, row 0 being the
    initial state before any step.
    """

    parameters: Optional[Array] = None
    parameters_norm: Optional[Array] = None
    performance: Optional[Array] = None
    selection_performance: Optional[Array] = None
    gradient: Optional[Array] = None
    gradient_norm: Optional[Array] = None
    training_direction: Optional[Array] = None
    training_rate: Optional[Array] = None
    elapsed_time: Optional[Array] = None

    def reserved(self) -> dict[str, Array]:
        """Mapping of quantity name to history for every reserved quantity."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


class HistoryRecorder:
    """Single-writer recorder appending reserved quantities per iteration."""

    def __init__(self, reservation: HistoryReservation, size: int, maximum_iterations_number: int) -> None:
        capacity = maximum_iterations_number + 1
        self._buffers: dict[str, _Buffer] = {}
        for name in reservation.enabled():
            width = size if name in VECTOR_QUANTITIES else None
            self._buffers[name] = _Buffer(capacity, width)

    def __len__(self) -> int:
        return max((len(buffer) for buffer in self._buffers.values()), default=0)

    def is_reserved(self, name: str) -> bool:
        return name in self._buffers

    def record(
        self,
        *,
        parameters: Array,
        parameters_norm: float,
        performance: float,
        selection_performance: Optional[float],
        gradient: Array,
        gradient_norm: float,
        training_direction: Array,
        training_rate: float,
        elapsed_time: float,
    ) -> None:
        values = {
            "parameters": parameters,
            "parameters_norm": parameters_norm,
            "performance": performance,
            "selection_performance": np.nan if selection_performance is None else selection_performance,
            "gradient": gradient,
            "gradient_norm": gradient_norm,
            "training_direction": training_direction,
            "training_rate": training_rate,
            "elapsed_time": elapsed_time,
        }
        for name, buffer in self._buffers.items():
            buffer.append(values[name])

    def snapshot(self) -> TrainingHistory:
        return TrainingHistory(
            **{name: buffer.trimmed() for name, buffer in self._buffers.items()}
        )


__all__ = [
    "HistoryRecorder",
    "HistoryReservation",
    "QUANTITIES",
    "SCALAR_QUANTITIES",
    "TrainingHistory",
    "VECTOR_QUANTITIES",
]
