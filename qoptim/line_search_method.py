"""Driver shared by descent methods that move along a line search."""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional

import numpy as np

from .core import EPSILON, Array
from .end_criteria import EndCriteria, EndCriteriaType
from .line_search import ArmijoLineSearch, LineSearch
from .logging import get_logger
from .method import OptimizationMethod
from .problem import Problem

logger = get_logger(__name__)


class LineSearchBasedMethod(OptimizationMethod):
    """
    Iterates line searches along directions supplied by subclasses.

    Each iteration runs the line search from the current value, asks
    :meth:`get_updated_direction` for the next direction and checks, in
    order, the relative function change (Numerical Recipes exit strategy),
    the iteration budget and the gradient norm.
    """

    def __init__(self, line_search: Optional[LineSearch] = None) -> None:
        self.line_search = line_search if line_search is not None else ArmijoLineSearch()

    @abstractmethod
    def get_updated_direction(
        self, problem: Problem, gold2: float, old_gradient: Array
    ) -> Array:
        """Return the next search direction.

        Called after a successful line search, while ``problem.current_value``
        still holds the previous iterate and ``problem.gradient_norm_value``
        the new squared gradient norm.

        Args:
            problem: Problem being minimized.
            gold2: Squared gradient norm at the previous iterate.
            old_gradient: Gradient at the previous iterate.
        """

    def _start(self, problem: Problem) -> None:
        """Hook run once at the beginning of :meth:`minimize`."""

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        ftol = end_criteria.function_epsilon
        ec_type = EndCriteriaType.NONE
        problem.reset()
        self.line_search.reset()
        self._start(problem)
        x = problem.current_value.copy()
        iteration = 0
        t = 1.0

        f0, prev_gradient = problem.value_and_gradient(x)
        problem.set_function_value(f0)
        problem.set_gradient_norm_value(float(np.dot(prev_gradient, prev_gradient)))
        self.line_search.search_direction = -prev_gradient
        logger.debug(
            "%s: starting from f=%.6g, |g|^2=%.6g",
            type(self).__name__,
            f0,
            problem.gradient_norm_value,
        )

        first_time = True
        while True:
            if not first_time:
                prev_gradient = self.line_search.last_gradient
            t, ec_type = self.line_search(problem, ec_type, end_criteria, t)
            if not self.line_search.succeed:
                break

            x = self.line_search.last_x
            f_old = problem.function_value
            problem.set_function_value(self.line_search.last_function_value)
            gold2 = problem.gradient_norm_value
            problem.set_gradient_norm_value(self.line_search.last_gradient_norm2)

            direction = self.get_updated_direction(problem, gold2, prev_gradient)
            self.line_search.search_direction = direction

            f_new = problem.function_value
            f_diff = 2.0 * abs(f_new - f_old) / (abs(f_new) + abs(f_old) + EPSILON)
            stop = f_diff < ftol
            if stop:
                ec_type = EndCriteriaType.STATIONARY_FUNCTION_VALUE
            check = end_criteria.check_max_iterations(iteration, ec_type)
            stop, ec_type = stop or check.triggered, check.ec_type
            if not stop:
                check = end_criteria.check_zero_gradient_norm(
                    float(np.sqrt(problem.gradient_norm_value)), ec_type
                )
                stop, ec_type = check.triggered, check.ec_type

            problem.set_current_value(x)
            if stop:
                break
            iteration += 1
            first_time = False

        problem.set_current_value(x)
        logger.debug(
            "%s: stopped with %s after %d iterations (%d evaluations), f=%.6g",
            type(self).__name__,
            ec_type.name,
            iteration,
            problem.function_evaluation,
            problem.function_value,
        )
        return ec_type


__all__ = ["LineSearchBasedMethod"]
