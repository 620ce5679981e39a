"""Expose a ``torch.nn.Module`` as a flat-vector performance functional."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import torch
from torch.nn.utils import parameters_to_vector, vector_to_parameters

LossFn = Callable[[torch.nn.Module], torch.Tensor]


class ModulePerformanceFunctional:
    """
    Performance functional over all trainable parameters of a module.

    The conjugate gradient loop works on float64 numpy vectors; this adapter
    copies them into the module's parameters before each evaluation and
    returns gradients computed by autograd.

    Parameters
    ----------
    module:
        Model whose parameters are trained.
    loss_fn:
        Callable returning the scalar training loss of ``module``.
    selection_loss_fn:
        Optional callable returning a scalar loss on held-out data.
    """

    def __init__(
        self,
        module: torch.nn.Module,
        loss_fn: LossFn,
        selection_loss_fn: Optional[LossFn] = None,
    ) -> None:
        self.module = module
        self.loss_fn = loss_fn
        self.selection_loss_fn = selection_loss_fn
        self._params = [p for p in module.parameters() if p.requires_grad]
        if not self._params:
            raise ValueError("module has no trainable parameters")
        first = self._params[0]
        self._dtype = first.dtype
        self._device = first.device

    @property
    def num_parameters(self) -> int:
        return sum(p.numel() for p in self._params)

    def get_parameters(self) -> np.ndarray:
        with torch.no_grad():
            vector = parameters_to_vector(self._params)
        return vector.detach().cpu().numpy().astype(np.float64)

    def set_parameters(self, parameters: np.ndarray) -> None:
        parameters = np.asarray(parameters, dtype=np.float64)
        if parameters.shape != (self.num_parameters,):
            raise ValueError(
                f"params length {parameters.shape} does not match expected length {self.num_parameters}"
            )
        vector = torch.as_tensor(parameters, dtype=self._dtype, device=self._device)
        with torch.no_grad():
            vector_to_parameters(vector, self._params)

    def _scalar(self, loss: torch.Tensor) -> float:
        if loss.ndim != 0:
            raise ValueError("loss_fn must return a scalar tensor.")
        return float(loss.item())

    def evaluate(self, parameters: np.ndarray) -> float:
        self.set_parameters(parameters)
        with torch.no_grad():
            return self._scalar(self.loss_fn(self.module))

    def gradient(self, parameters: np.ndarray) -> np.ndarray:
        self.set_parameters(parameters)
        for p in self._params:
            p.grad = None
        loss = self.loss_fn(self.module)
        self._scalar(loss)
        grads = torch.autograd.grad(loss, self._params, allow_unused=True)
        flat = [
            torch.zeros_like(p).reshape(-1) if g is None else g.reshape(-1)
            for p, g in zip(self._params, grads)
        ]
        return torch.cat(flat).detach().cpu().numpy().astype(np.float64)

    def selection_performance(self, parameters: np.ndarray) -> Optional[float]:
        if self.selection_loss_fn is None:
            return None
        self.set_parameters(parameters)
        with torch.no_grad():
            return self._scalar(self.selection_loss_fn(self.module))


__all__ = ["LossFn", "ModulePerformanceFunctional"]
