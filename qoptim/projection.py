"""
Calibration of a subset of parameters.

A :class:`Projection` splits a full parameter vector into free and fixed
components with a boolean mask (True means fixed). Wrapping the cost function
and the constraint with the projection lets any optimization method work on
the free components only:

    >>> import numpy as np
    >>> from qoptim.projection import Projection
    >>> projection = Projection([1.0, 2.0, 3.0], fix_parameters=[False, True, False])
    >>> projection.project(np.array([10.0, 20.0, 30.0]))
    array([10., 30.])
    >>> projection.include(np.array([-1.0, -3.0]))
    array([-1.,  2., -3.])
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .constraint import Constraint
from .core import Array
from .cost_function import CostFunction
from .utils import as_vector


class Projection:
    """Maps between full and free-parameter vectors.

    Args:
        parameter_values: Full parameter vector; its fixed components are the
            template used by :meth:`include`.
        fix_parameters: One flag per parameter, True when the parameter is
            fixed. Defaults to all free.
    """

    def __init__(
        self,
        parameter_values: Sequence[float],
        fix_parameters: Optional[Sequence[bool]] = None,
    ) -> None:
        self.fixed_parameters = as_vector(parameter_values, "parameter_values")
        if fix_parameters is None:
            fix_parameters = [False] * self.fixed_parameters.size
        self.fix_parameters = np.asarray(fix_parameters, dtype=bool)
        if self.fix_parameters.shape != self.fixed_parameters.shape:
            raise ValueError(
                f"fixed parameters size ({self.fixed_parameters.size}) "
                f"!= fix flags size ({self.fix_parameters.size})"
            )
        self._free = ~self.fix_parameters
        if self.number_of_free_parameters == 0:
            raise ValueError("number of free parameters is zero")

    @property
    def number_of_free_parameters(self) -> int:
        return int(np.count_nonzero(self._free))

    def include(self, projected_parameters: Array) -> Array:
        """Full vector: the template with free components replaced."""
        projected_parameters = as_vector(projected_parameters, "projected_parameters")
        if projected_parameters.size != self.number_of_free_parameters:
            raise ValueError(
                f"projected parameters size ({projected_parameters.size}) "
                f"!= number of free parameters ({self.number_of_free_parameters})"
            )
        y = self.fixed_parameters.copy()
        y[self._free] = projected_parameters
        return y

    def project(self, parameters: Array) -> Array:
        """Free components of a full vector."""
        parameters = as_vector(parameters, "parameters")
        if parameters.size != self.fix_parameters.size:
            raise ValueError(
                f"parameters size ({parameters.size}) "
                f"!= fix flags size ({self.fix_parameters.size})"
            )
        return parameters[self._free].copy()


class ProjectedCostFunction(CostFunction):
    """Evaluates ``cost_function`` on ``projection.include(x)``."""

    def __init__(self, cost_function: CostFunction, projection: Projection) -> None:
        self.cost_function = cost_function
        self.projection = projection

    def value(self, free_parameters: Array) -> float:
        return float(self.cost_function.value(self.projection.include(free_parameters)))

    def values(self, free_parameters: Array) -> Array:
        return np.asarray(
            self.cost_function.values(self.projection.include(free_parameters)), dtype=float
        )


class ProjectedConstraint(Constraint):
    """``constraint`` seen through a projection.

    Feasibility is tested on the included full vector; bounds are computed
    on it and projected back to the free components.
    """

    def __init__(self, constraint: Constraint, projection: Projection) -> None:
        self.constraint = constraint
        self.projection = projection

    def empty(self) -> bool:
        return self.constraint.empty()

    def test(self, params: Array) -> bool:
        return self.constraint.test(self.projection.include(params))

    def _upper_bound(self, params: Array) -> Array:
        full = self.projection.include(params)
        return self.projection.project(self.constraint.upper_bound(full))

    def _lower_bound(self, params: Array) -> Array:
        full = self.projection.include(params)
        return self.projection.project(self.constraint.lower_bound(full))


__all__ = ["Projection", "ProjectedCostFunction", "ProjectedConstraint"]
