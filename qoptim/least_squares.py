"""
Non-linear least-squares fitting driver.

A :class:`LeastSquareProblem` supplies a target vector and the model values
fitted to it. :class:`NonLinearLeastSquare` turns it into a
:class:`LeastSquareFunction` (sum of squared residuals) and minimizes that
with any :class:`~qoptim.method.OptimizationMethod`, conjugate gradient by
default.

Example:
    >>> import numpy as np
    >>> from qoptim import NoConstraint
    >>> from qoptim.least_squares import LeastSquareProblem, NonLinearLeastSquare
    >>> class Line(LeastSquareProblem):
    ...     xs = np.array([0.0, 1.0, 2.0, 3.0])
    ...     def size(self):
    ...         return 2
    ...     def target_and_value(self, x):
    ...         return 1.0 + 2.0 * self.xs, x[0] + x[1] * self.xs
    >>> solver = NonLinearLeastSquare(NoConstraint(), accuracy=1e-10, max_iterations=200)
    >>> solver.set_initial_value(np.zeros(2))
    >>> fit = solver.perform(Line())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .constraint import Constraint
from .core import FINITE_DIFFERENCE_EPSILON, Array
from .cost_function import CostFunction
from .end_criteria import EndCriteria, EndCriteriaType
from .gradient import ConjugateGradient
from .logging import get_logger
from .method import OptimizationMethod
from .problem import Problem
from .utils import approx_jacobian, as_vector

logger = get_logger(__name__)


class LeastSquareProblem(ABC):
    """Target data and the model fitted to it."""

    @abstractmethod
    def size(self) -> int:
        """Number of data points (length of the target vector)."""

    @abstractmethod
    def target_and_value(self, x: Array) -> tuple[Array, Array]:
        """Return ``(target, fitted)`` for parameters ``x``."""

    def target_value_and_gradient(self, x: Array) -> tuple[Array, Array, Array]:
        """Return ``(target, fitted, jacobian)``.

        The Jacobian of the fitted values has shape ``(size(), len(x))``.
        The default uses central finite differences; override it when the
        model has an analytic derivative.
        """
        target, fitted = self.target_and_value(x)
        jacobian = approx_jacobian(
            lambda p: self.target_and_value(p)[1], x, eps=FINITE_DIFFERENCE_EPSILON
        )
        return target, fitted, jacobian


class LeastSquareFunction(CostFunction):
    """Squared residual norm of a :class:`LeastSquareProblem`."""

    def __init__(self, problem: LeastSquareProblem) -> None:
        self.problem = problem

    def _residuals(self, target: Array, fitted: Array) -> Array:
        target = as_vector(target, "target")
        fitted = as_vector(fitted, "fitted")
        if target.size != fitted.size:
            raise ValueError(
                f"target size ({target.size}) not equal to fitted size ({fitted.size})"
            )
        return target - fitted

    def values(self, x: Array) -> Array:
        return self._residuals(*self.problem.target_and_value(x))

    def value(self, x: Array) -> float:
        diff = self.values(x)
        return float(np.dot(diff, diff))

    def gradient(self, x: Array) -> Array:
        return self.value_and_gradient(x)[1]

    def value_and_gradient(self, x: Array) -> tuple[float, Array]:
        target, fitted, jacobian = self.problem.target_value_and_gradient(x)
        diff = self._residuals(target, fitted)
        return float(np.dot(diff, diff)), -2.0 * np.asarray(jacobian, dtype=float).T @ diff


class NonLinearLeastSquare:
    """
    Fits a :class:`LeastSquareProblem` under a constraint.

    Args:
        constraint: Feasible region of the parameters.
        accuracy: Used as root, function and gradient-norm tolerance.
        max_iterations: Iteration budget.
        method: Optimization method; a fresh :class:`ConjugateGradient` by
            default.
    """

    def __init__(
        self,
        constraint: Constraint,
        accuracy: float = 1e-4,
        max_iterations: int = 100,
        method: Optional[OptimizationMethod] = None,
    ) -> None:
        self.constraint = constraint
        self.accuracy = accuracy
        self.max_iterations = max_iterations
        self.method = method if method is not None else ConjugateGradient()
        self._initial_value: Optional[Array] = None
        self._results: Optional[Array] = None
        self._resnorm: Optional[float] = None
        self._best_accuracy: Optional[float] = None
        self._exit_flag = EndCriteriaType.NONE
        self._iterations_done = 0

    def set_initial_value(self, initial_value: Array) -> None:
        self._initial_value = as_vector(initial_value, "initial_value")

    def perform(self, problem: LeastSquareProblem) -> Array:
        """Minimize the squared residual norm and return the fitted parameters."""
        if self._initial_value is None:
            raise ValueError("initial value not set")
        eps = self.accuracy
        cost_function = LeastSquareFunction(problem)
        opt_problem = Problem(cost_function, self.constraint, self._initial_value)
        end_criteria = EndCriteria(
            self.max_iterations, min(self.max_iterations // 2, 100), eps, eps, eps
        )
        self._exit_flag = self.method.minimize(opt_problem, end_criteria)
        self._results = opt_problem.current_value.copy()
        self._resnorm = opt_problem.function_value
        self._best_accuracy = opt_problem.function_value
        self._iterations_done = opt_problem.function_evaluation
        logger.debug(
            "NonLinearLeastSquare: %s, residual norm %.6g",
            self._exit_flag.name,
            self._resnorm,
        )
        return self._results

    @property
    def results(self) -> Optional[Array]:
        return self._results

    @property
    def residual_norm(self) -> Optional[float]:
        return self._resnorm

    @property
    def last_value(self) -> Optional[float]:
        return self._best_accuracy

    @property
    def exit_flag(self) -> EndCriteriaType:
        return self._exit_flag

    @property
    def iterations_done(self) -> int:
        """Cost function evaluations used by the last :meth:`perform`."""
        return self._iterations_done


__all__ = [
    "LeastSquareProblem",
    "LeastSquareFunction",
    "NonLinearLeastSquare",
]
