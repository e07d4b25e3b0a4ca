"""Broyden-Fletcher-Goldfarb-Shanno quasi-Newton method."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array
from .line_search import LineSearch
from .line_search_method import LineSearchBasedMethod
from .logging import get_logger
from .problem import Problem

logger = get_logger(__name__)


class BFGS(LineSearchBasedMethod):
    """
    BFGS with an explicit inverse-Hessian approximation.

    The approximation starts at the identity. After every accepted step the
    rank-two update is applied with ``s`` the step and ``y`` the gradient
    change, unless ``y.s <= sqrt(1e-8 |y|^2 |s|^2)``, in which case the
    previous approximation is kept.
    """

    def __init__(self, line_search: Optional[LineSearch] = None) -> None:
        super().__init__(line_search)
        self.inverse_hessian: Optional[Array] = None

    def _start(self, problem: Problem) -> None:
        self.inverse_hessian = None

    def get_updated_direction(
        self, problem: Problem, gold2: float, old_gradient: Array
    ) -> Array:
        n = problem.current_value.size
        if self.inverse_hessian is None:
            self.inverse_hessian = np.eye(n)

        new_gradient = self.line_search.last_gradient
        s = self.line_search.last_x - problem.current_value
        y = new_gradient - old_gradient
        hy = self.inverse_hessian @ y

        ys = float(np.dot(y, s))
        yhy = float(np.dot(y, hy))
        if ys > np.sqrt(1e-8 * np.dot(y, y) * np.dot(s, s)):
            u = s / ys - hy / yhy
            self.inverse_hessian = (
                self.inverse_hessian
                + np.outer(s, s) / ys
                - np.outer(hy, hy) / yhy
                + yhy * np.outer(u, u)
            )
        else:
            logger.debug("BFGS: skipping update, y.s=%.3g not sufficiently positive", ys)

        return -self.inverse_hessian @ new_gradient


__all__ = ["BFGS"]
