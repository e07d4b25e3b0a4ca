"""Objective abstraction shared by every optimization method."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .core import FINITE_DIFFERENCE_EPSILON, Array, Gradient, Objective, Residuals
from .utils import approx_grad, approx_jacobian, as_vector


class CostFunction(ABC):
    """
    Vector-valued objective with a scalar summary.

    Subclasses implement :meth:`values`. :meth:`value` defaults to the root
    mean square of the values, and derivatives default to central finite
    differences with :meth:`finite_difference_epsilon`.
    """

    @abstractmethod
    def values(self, x: Array) -> Array:
        """Return the vector of residuals (or components) at ``x``."""

    def value(self, x: Array) -> float:
        v = np.asarray(self.values(x), dtype=float)
        return float(np.sqrt(np.dot(v, v) / v.size))

    def finite_difference_epsilon(self) -> float:
        return FINITE_DIFFERENCE_EPSILON

    def gradient(self, x: Array) -> Array:
        return approx_grad(self.value, x, eps=self.finite_difference_epsilon())

    def jacobian(self, x: Array) -> Array:
        """Jacobian of :meth:`values`, shape ``(len(values), len(x))``."""
        return approx_jacobian(self.values, x, eps=self.finite_difference_epsilon())

    def value_and_gradient(self, x: Array) -> tuple[float, Array]:
        return self.value(x), self.gradient(x)

    def values_and_jacobian(self, x: Array) -> tuple[Array, Array]:
        return np.asarray(self.values(x), dtype=float), self.jacobian(x)


class CallableCostFunction(CostFunction):
    """Cost function assembled from plain callables.

    At least one of ``value_fn`` or ``values_fn`` is required. When only
    ``value_fn`` is given the values are the one-element vector
    ``[value_fn(x)]``.
    """

    def __init__(
        self,
        value_fn: Optional[Objective] = None,
        values_fn: Optional[Residuals] = None,
        gradient_fn: Optional[Gradient] = None,
        eps: float = FINITE_DIFFERENCE_EPSILON,
    ) -> None:
        if value_fn is None and values_fn is None:
            raise ValueError("either value_fn or values_fn must be given")
        if eps <= 0:
            raise ValueError("eps must be positive")
        self._value_fn = value_fn
        self._values_fn = values_fn
        self._gradient_fn = gradient_fn
        self._eps = eps

    def finite_difference_epsilon(self) -> float:
        return self._eps

    def values(self, x: Array) -> Array:
        if self._values_fn is None:
            return np.array([float(self._value_fn(x))])
        return as_vector(self._values_fn(x), "values")

    def value(self, x: Array) -> float:
        if self._value_fn is None:
            return super().value(x)
        return float(self._value_fn(x))

    def gradient(self, x: Array) -> Array:
        if self._gradient_fn is None:
            return super().gradient(x)
        return as_vector(self._gradient_fn(x), "gradient")


__all__ = ["CostFunction", "CallableCostFunction"]
