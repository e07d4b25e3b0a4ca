"""
Feasible regions for constrained optimization.

A constraint is a predicate over parameter vectors plus per-component bounds.
Methods never project onto the region; instead they shorten their steps with
:meth:`Constraint.update` until the trial point is feasible.

Example:
    >>> import numpy as np
    >>> from qoptim.constraint import PositiveConstraint
    >>> PositiveConstraint().test(np.array([1.0, -0.1]))
    False
    >>> PositiveConstraint().lower_bound(np.array([1.0, 1.0]))
    array([0., 0.])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from .core import MAX_REAL, MAX_STEP_HALVINGS, Array
from .utils import as_vector, check_same_size


class Constraint(ABC):
    """Base class of all feasible regions."""

    @abstractmethod
    def test(self, params: Array) -> bool:
        """Return True iff every component of ``params`` lies in the region."""

    def empty(self) -> bool:
        return False

    def upper_bound(self, params: Array) -> Array:
        params = np.asarray(params, dtype=float)
        result = as_vector(self._upper_bound(params), "upper bound")
        check_same_size(result, params, "upper bound")
        return result

    def lower_bound(self, params: Array) -> Array:
        params = np.asarray(params, dtype=float)
        result = as_vector(self._lower_bound(params), "lower bound")
        check_same_size(result, params, "lower bound")
        return result

    def _upper_bound(self, params: Array) -> Array:
        return np.full(params.shape[0], MAX_REAL)

    def _lower_bound(self, params: Array) -> Array:
        return np.full(params.shape[0], -MAX_REAL)

    def update(self, params: Array, direction: Array, beta: float) -> tuple[Array, float]:
        """Move ``params`` along ``direction``, halving the step until feasible.

        Returns:
            The new parameter vector and the accepted step size. ``params`` is
            left untouched.

        Raises:
            RuntimeError: If no feasible point was found after
                ``MAX_STEP_HALVINGS`` halvings.
        """
        params = np.asarray(params, dtype=float)
        direction = np.asarray(direction, dtype=float)
        diff = float(beta)
        new_params = params + diff * direction
        count = 0
        while not self.test(new_params):
            if count > MAX_STEP_HALVINGS:
                raise RuntimeError("can't update parameter vector")
            diff *= 0.5
            count += 1
            new_params = params + diff * direction
        return new_params, diff


class NoConstraint(Constraint):
    """The whole parameter space."""

    def test(self, params: Array) -> bool:
        return True


class PositiveConstraint(Constraint):
    """Strictly positive parameters."""

    def test(self, params: Array) -> bool:
        return bool(np.all(np.asarray(params, dtype=float) > 0.0))

    def _lower_bound(self, params: Array) -> Array:
        return np.zeros(params.shape[0])


class BoundaryConstraint(Constraint):
    """Every component within the same closed interval ``[low, high]``."""

    def __init__(self, low: float, high: float) -> None:
        if low > high:
            raise ValueError(f"lower bound ({low}) greater than upper bound ({high})")
        self.low = float(low)
        self.high = float(high)

    def test(self, params: Array) -> bool:
        params = np.asarray(params, dtype=float)
        return bool(np.all((params >= self.low) & (params <= self.high)))

    def _upper_bound(self, params: Array) -> Array:
        return np.full(params.shape[0], self.high)

    def _lower_bound(self, params: Array) -> Array:
        return np.full(params.shape[0], self.low)


class NonhomogeneousBoundaryConstraint(Constraint):
    """Per-component closed intervals ``[low[i], high[i]]``."""

    def __init__(self, low: Sequence[float], high: Sequence[float]) -> None:
        self.low = as_vector(low, "low")
        self.high = as_vector(high, "high")
        if self.low.shape != self.high.shape:
            raise ValueError("Upper and lower boundaries sizes are inconsistent")

    def test(self, params: Array) -> bool:
        params = np.asarray(params, dtype=float)
        if params.shape[0] != self.low.shape[0]:
            raise ValueError("Number of parameters and boundaries sizes are inconsistent")
        return bool(np.all((params >= self.low) & (params <= self.high)))

    def _upper_bound(self, params: Array) -> Array:
        return self.high.copy()

    def _lower_bound(self, params: Array) -> Array:
        return self.low.copy()


class CompositeConstraint(Constraint):
    """Intersection of two constraints."""

    def __init__(self, c1: Constraint, c2: Constraint) -> None:
        self.c1 = c1
        self.c2 = c2

    def empty(self) -> bool:
        return self.c1.empty() or self.c2.empty()

    def test(self, params: Array) -> bool:
        return self.c1.test(params) and self.c2.test(params)

    def _upper_bound(self, params: Array) -> Array:
        return np.minimum(self.c1.upper_bound(params), self.c2.upper_bound(params))

    def _lower_bound(self, params: Array) -> Array:
        return np.maximum(self.c1.lower_bound(params), self.c2.lower_bound(params))


__all__ = [
    "Constraint",
    "NoConstraint",
    "PositiveConstraint",
    "BoundaryConstraint",
    "NonhomogeneousBoundaryConstraint",
    "CompositeConstraint",
]
