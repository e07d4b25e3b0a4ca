"""
Derivative-free multi-dimensional simplex (Nelder-Mead) method.

The simplex is seeded with ``n + 1`` vertices: the current value and one
vertex per axis, moved by the characteristic length with the constraint's
feasibility repair. Every iteration reflects the worst vertex through the
centroid of the others, expanding or contracting the move depending on the
result, and shrinks the whole simplex toward the best vertex when nothing
improves. Trial points that leave the feasible region are pulled back by
halving the move.

The run ends once the mean distance of the vertices from their centroid drops
below ``root_epsilon`` (GSL exit strategy on x) or the iteration budget is
spent.

References:
    - Press et al., *Numerical Recipes in C*, 2nd edition, section 10.4.
"""

from __future__ import annotations

import numpy as np

from .core import EPSILON, Array
from .end_criteria import EndCriteria, EndCriteriaType
from .logging import get_logger
from .method import OptimizationMethod
from .problem import Problem
from .utils import simplex_size

logger = get_logger(__name__)


class Simplex(OptimizationMethod):
    """Nelder-Mead simplex with characteristic length ``lambda_``."""

    def __init__(self, lambda_: float) -> None:
        if lambda_ <= 0.0:
            raise ValueError("simplex characteristic length must be positive")
        self.lambda_ = float(lambda_)
        self._vertices: list[Array] = []
        self._values: Array = np.zeros(0)
        self._sum: Array = np.zeros(0)

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        xtol = end_criteria.root_epsilon
        ec_type = EndCriteriaType.NONE
        problem.reset()
        x = problem.current_value
        n = x.size

        self._vertices = [x.copy()]
        for i in range(n):
            direction = np.zeros(n)
            direction[i] = 1.0
            vertex, _ = problem.constraint.update(x, direction, self.lambda_)
            self._vertices.append(vertex)
        self._values = np.array([problem.value(v) for v in self._vertices])
        logger.debug("Simplex: %d vertices, best f=%.6g", n + 1, self._values.min())

        for iteration in range(1, end_criteria.max_iterations + 1):
            self._sum = np.sum(self._vertices, axis=0)

            # best (lowest), worst (highest) and second worst vertices
            i_lowest = 0
            if self._values[0] < self._values[1]:
                i_highest, i_next_highest = 1, 0
            else:
                i_highest, i_next_highest = 0, 1
            for i in range(1, n + 1):
                if self._values[i] > self._values[i_highest]:
                    i_next_highest = i_highest
                    i_highest = i
                elif self._values[i] > self._values[i_next_highest] and i != i_highest:
                    i_next_highest = i
                if self._values[i] < self._values[i_lowest]:
                    i_lowest = i

            size = simplex_size(self._vertices)
            if size < xtol or end_criteria.check_max_iterations(iteration).triggered:
                ec_type = end_criteria.check_stationary_point(
                    0.0, 0.0, end_criteria.max_stationary_state_iterations, ec_type
                ).ec_type
                ec_type = end_criteria.check_max_iterations(iteration, ec_type).ec_type
                return self._finish(problem, i_lowest, ec_type, iteration)

            factor = -1.0
            v_try, factor = self._extrapolate(problem, i_highest, factor)
            if v_try <= self._values[i_lowest] and factor == -1.0:
                _, factor = self._extrapolate(problem, i_highest, 2.0)
            elif abs(factor) > EPSILON and v_try >= self._values[i_next_highest]:
                v_save = self._values[i_highest]
                v_try, factor = self._extrapolate(problem, i_highest, 0.5)
                if v_try >= v_save and abs(factor) > EPSILON:
                    best = self._vertices[i_lowest]
                    for i in range(n + 1):
                        if i != i_lowest:
                            self._vertices[i] = 0.5 * (self._vertices[i] + best)
                            self._values[i] = problem.value(self._vertices[i])

            if abs(factor) <= EPSILON:
                logger.debug("Simplex: cannot extrapolate within the constraint, giving up")
                return self._finish(
                    problem,
                    i_lowest,
                    EndCriteriaType.STATIONARY_FUNCTION_VALUE,
                    iteration,
                )

        # the max-iterations check above always fires on the last pass
        raise RuntimeError("optimization failed: unexpected behaviour")

    def _finish(
        self, problem: Problem, i_lowest: int, ec_type: EndCriteriaType, iteration: int
    ) -> EndCriteriaType:
        problem.set_current_value(self._vertices[i_lowest])
        problem.set_function_value(self._values[i_lowest])
        logger.debug(
            "Simplex: stopped with %s after %d iterations, f=%.6g",
            ec_type.name,
            iteration,
            self._values[i_lowest],
        )
        return ec_type

    def _extrapolate(self, problem: Problem, i_highest: int, factor: float) -> tuple[float, float]:
        """Move the worst vertex through the centroid by ``factor``.

        Returns the cost at the trial point and the factor actually used. A
        factor of (almost) zero means no feasible trial point was found, in
        which case the worst cost is returned unchanged.
        """
        dimensions = len(self._values) - 1
        while True:
            factor1 = (1.0 - factor) / dimensions
            factor2 = factor1 - factor
            p_try = self._sum * factor1 - self._vertices[i_highest] * factor2
            factor *= 0.5
            if problem.constraint.test(p_try) or abs(factor) <= EPSILON:
                break

        if abs(factor) <= EPSILON:
            return float(self._values[i_highest]), factor

        factor *= 2.0
        v_try = problem.value(p_try)
        if v_try < self._values[i_highest]:
            self._values[i_highest] = v_try
            self._sum = self._sum + p_try - self._vertices[i_highest]
            self._vertices[i_highest] = p_try
        return v_try, factor


__all__ = ["Simplex"]
