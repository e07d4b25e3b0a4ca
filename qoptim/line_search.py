"""Constraint-aware inexact line searches.

A line search starts from the problem's current value and moves along
:attr:`LineSearch.search_direction`. Step sizes are shortened by bisection
whenever the trial point leaves the feasible region, then adjusted until the
sufficient-decrease test of the concrete search holds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .constraint import Constraint
from .core import EPSILON, Array
from .end_criteria import EndCriteria, EndCriteriaType
from .problem import Problem


class LineSearch(ABC):
    """Base class holding the state of the last accepted step."""

    def __init__(self, eps: float = 1e-8) -> None:
        self.eps = eps
        self.search_direction: Optional[Array] = None
        self._xtd: Optional[Array] = None
        self._gradient: Optional[Array] = None
        self._qt = 0.0
        self._qpt = 0.0
        self._succeed = True

    def reset(self) -> None:
        self.search_direction = None
        self._xtd = None
        self._gradient = None
        self._qt = 0.0
        self._qpt = 0.0
        self._succeed = True

    @property
    def last_x(self) -> Array:
        return self._xtd

    @property
    def last_function_value(self) -> float:
        return self._qt

    @property
    def last_gradient(self) -> Array:
        return self._gradient

    @property
    def last_gradient_norm2(self) -> float:
        return self._qpt

    @property
    def succeed(self) -> bool:
        return self._succeed

    def update(
        self, params: Array, direction: Array, beta: float, constraint: Constraint
    ) -> tuple[Array, float]:
        """Step from ``params`` along ``direction``, bisecting until feasible."""
        return constraint.update(params, direction, beta)

    def _initial_slope(self, problem: Problem) -> float:
        # Minus the directional derivative along the search direction.
        if self._gradient is None:
            return float(problem.gradient_norm_value)
        return -float(np.dot(self._gradient, self.search_direction))

    def _trial(self, problem: Problem, t: float) -> float:
        self._xtd, t = self.update(
            problem.current_value, self.search_direction, t, problem.constraint
        )
        self._qt = problem.value(self._xtd)
        return t

    def _finish(self, problem: Problem) -> None:
        self._gradient = problem.gradient(self._xtd)
        self._qpt = float(np.dot(self._gradient, self._gradient))

    @abstractmethod
    def __call__(
        self,
        problem: Problem,
        ec_type: EndCriteriaType,
        end_criteria: EndCriteria,
        t_ini: float,
    ) -> tuple[float, EndCriteriaType]:
        """Perform the search and return the accepted step and termination type."""


class ArmijoLineSearch(LineSearch):
    """Backtracking search on the Armijo sufficient-decrease condition.

    Starting from ``t_ini`` the step is multiplied by ``beta`` while the
    decrease is insufficient or the previous (longer) step already was
    sufficient.
    """

    def __init__(self, eps: float = 1e-8, alpha: float = 0.05, beta: float = 0.65) -> None:
        if not (0 < alpha < 1):
            raise ValueError("alpha must lie in (0, 1)")
        if not (0 < beta < 1):
            raise ValueError("beta must lie in (0, 1)")
        super().__init__(eps)
        self.alpha = alpha
        self.beta = beta

    def __call__(
        self,
        problem: Problem,
        ec_type: EndCriteriaType,
        end_criteria: EndCriteria,
        t_ini: float,
    ) -> tuple[float, EndCriteriaType]:
        self._succeed = True
        max_iter = False
        q0 = problem.function_value
        qpt = self._initial_slope(problem)
        t = self._trial(problem, t_ini)

        loop_number = 0
        if (self._qt - q0) > -self.alpha * t * qpt:
            while True:
                loop_number += 1
                t *= self.beta
                qt_old = self._qt
                t = self._trial(problem, t)
                check = end_criteria.check_max_iterations(loop_number, ec_type)
                max_iter, ec_type = check.triggered, check.ec_type
                insufficient = (self._qt - q0) > -self.alpha * t * qpt
                previous_sufficient = (qt_old - q0) <= -self.alpha * t * qpt / self.beta
                if not (insufficient or previous_sufficient) or max_iter:
                    break

        if max_iter:
            self._succeed = False
        self._finish(problem)
        return t, ec_type


class GoldsteinLineSearch(LineSearch):
    """Bracketing search on both Goldstein conditions.

    The step is extrapolated by ``extrapolation`` until it overshoots, then
    bisected inside the bracket until
    ``-beta t q' <= f(x + t d) - f(x) <= -alpha t q'``.
    """

    def __init__(
        self,
        eps: float = 1e-8,
        alpha: float = 0.05,
        beta: float = 0.65,
        extrapolation: float = 1.5,
    ) -> None:
        if not (0 < alpha < beta < 1):
            raise ValueError("Require 0 < alpha < beta < 1 for Goldstein conditions.")
        if extrapolation <= 1.0:
            raise ValueError("extrapolation must be greater than one")
        super().__init__(eps)
        self.alpha = alpha
        self.beta = beta
        self.extrapolation = extrapolation

    def __call__(
        self,
        problem: Problem,
        ec_type: EndCriteriaType,
        end_criteria: EndCriteria,
        t_ini: float,
    ) -> tuple[float, EndCriteriaType]:
        self._succeed = True
        max_iter = False
        q0 = problem.function_value
        qpt = self._initial_slope(problem)
        t = self._trial(problem, t_ini)

        t_left = 0.0
        t_right = 0.0
        loop_number = 0
        while (self._qt - q0) < -self.beta * t * qpt or (self._qt - q0) > -self.alpha * t * qpt:
            if (self._qt - q0) > -self.alpha * t * qpt:
                t_right = t
            else:
                t_left = t
            loop_number += 1

            if abs(t_right) <= EPSILON:
                t *= self.extrapolation
            else:
                t = 0.5 * (t_left + t_right)

            t = self._trial(problem, t)
            check = end_criteria.check_max_iterations(loop_number, ec_type)
            max_iter, ec_type = check.triggered, check.ec_type
            if max_iter:
                break

        if max_iter:
            self._succeed = False
        self._finish(problem)
        return t, ec_type


__all__ = ["LineSearch", "ArmijoLineSearch", "GoldsteinLineSearch"]
