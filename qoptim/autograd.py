"""Cost functions differentiated with PyTorch autograd."""

from __future__ import annotations

import math
from typing import Callable

import numpy as np
import torch

from .core import Array
from .cost_function import CostFunction
from .utils import as_vector

TorchFn = Callable[[torch.Tensor], torch.Tensor]


class AutogradCostFunction(CostFunction):
    """
    Cost function backed by a differentiable torch function.

    ``fn`` receives a 1-D float64 tensor and returns either a scalar tensor
    (the value) or a 1-D tensor (the values, whose root mean square is the
    value). Gradients and Jacobians are exact, computed with
    :mod:`torch.autograd` instead of finite differences.

    Args:
        fn: Differentiable objective or residual function.

    Raises:
        ValueError: If ``fn`` returns a tensor with more than one dimension.
    """

    def __init__(self, fn: TorchFn) -> None:
        self.fn = fn

    @staticmethod
    def _to_tensor(x: Array) -> torch.Tensor:
        return torch.as_tensor(as_vector(x), dtype=torch.float64)

    def _evaluate(self, params: torch.Tensor) -> torch.Tensor:
        out = self.fn(params)
        if out.ndim > 1:
            raise ValueError(
                f"fn must return a scalar or 1D tensor, got shape {tuple(out.shape)}"
            )
        return out

    def _scalar(self, params: torch.Tensor) -> torch.Tensor:
        out = self._evaluate(params)
        if out.ndim == 0:
            return out
        # zero subgradient at an exact fit
        return torch.linalg.vector_norm(out) / math.sqrt(out.numel())

    def values(self, x: Array) -> Array:
        with torch.no_grad():
            out = self._evaluate(self._to_tensor(x))
        return np.atleast_1d(out.detach().cpu().numpy().astype(float))

    def value(self, x: Array) -> float:
        with torch.no_grad():
            return float(self._scalar(self._to_tensor(x)))

    def value_and_gradient(self, x: Array) -> tuple[float, Array]:
        params = self._to_tensor(x).clone().detach().requires_grad_(True)
        value = self._scalar(params)
        value.backward()
        grad = params.grad
        if grad is None:
            raise RuntimeError("Autograd did not produce gradients for params.")
        return float(value.detach()), grad.detach().cpu().numpy().astype(float)

    def gradient(self, x: Array) -> Array:
        return self.value_and_gradient(x)[1]

    def jacobian(self, x: Array) -> Array:
        params = self._to_tensor(x)
        jac = torch.autograd.functional.jacobian(
            lambda p: torch.atleast_1d(self._evaluate(p)), params
        )
        return jac.detach().cpu().numpy().astype(float).reshape(-1, params.numel())


__all__ = ["AutogradCostFunction"]
