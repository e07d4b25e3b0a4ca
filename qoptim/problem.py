"""Constrained optimization problem: objective, feasible region and state."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .constraint import Constraint
from .core import Array
from .cost_function import CostFunction
from .utils import as_vector


class Problem:
    """
    Couples a cost function and a constraint with the current iterate.

    Methods mutate the problem in place while minimizing: the current value,
    the function value there and the squared gradient norm there. All cost
    function calls made through the problem are counted.
    """

    def __init__(
        self,
        cost_function: CostFunction,
        constraint: Constraint,
        initial_value: Array,
    ) -> None:
        if constraint is None or constraint.empty():
            raise ValueError("empty constraint given")
        self._cost_function = cost_function
        self._constraint = constraint
        self._current_value = as_vector(initial_value, "initial_value")
        self._function_value: Optional[float] = None
        self._squared_norm: Optional[float] = None
        self._function_evaluation = 0
        self._gradient_evaluation = 0

    @property
    def cost_function(self) -> CostFunction:
        return self._cost_function

    @property
    def constraint(self) -> Constraint:
        return self._constraint

    @property
    def current_value(self) -> Array:
        return self._current_value

    @property
    def function_value(self) -> Optional[float]:
        return self._function_value

    @property
    def gradient_norm_value(self) -> Optional[float]:
        """Squared norm of the gradient at the current value."""
        return self._squared_norm

    @property
    def function_evaluation(self) -> int:
        return self._function_evaluation

    @property
    def gradient_evaluation(self) -> int:
        return self._gradient_evaluation

    def reset(self) -> None:
        """Clear counters and cached values; the current value is kept."""
        self._function_evaluation = 0
        self._gradient_evaluation = 0
        self._function_value = None
        self._squared_norm = None

    def set_current_value(self, current_value: Array) -> None:
        self._current_value = as_vector(current_value, "current_value")

    def set_function_value(self, function_value: float) -> None:
        self._function_value = float(function_value)

    def set_gradient_norm_value(self, squared_norm: float) -> None:
        self._squared_norm = float(squared_norm)

    def value(self, x: Array) -> float:
        self._function_evaluation += 1
        return float(self._cost_function.value(x))

    def values(self, x: Array) -> Array:
        self._function_evaluation += 1
        return np.asarray(self._cost_function.values(x), dtype=float)

    def gradient(self, x: Array) -> Array:
        self._function_evaluation += 1
        self._gradient_evaluation += 1
        return np.asarray(self._cost_function.gradient(x), dtype=float)

    def value_and_gradient(self, x: Array) -> tuple[float, Array]:
        self._function_evaluation += 1
        self._gradient_evaluation += 1
        value, grad = self._cost_function.value_and_gradient(x)
        return float(value), np.asarray(grad, dtype=float)


__all__ = ["Problem"]
