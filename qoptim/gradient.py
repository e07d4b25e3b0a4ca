"""First-order line-search methods."""

from __future__ import annotations

import numpy as np

from .core import Array
from .line_search_method import LineSearchBasedMethod
from .logging import get_logger
from .problem import Problem

logger = get_logger(__name__)


class SteepestDescent(LineSearchBasedMethod):
    """Moves along the negative gradient."""

    def get_updated_direction(
        self, problem: Problem, gold2: float, old_gradient: Array
    ) -> Array:
        return -self.line_search.last_gradient


class ConjugateGradient(LineSearchBasedMethod):
    """Fletcher-Reeves nonlinear conjugate gradient.

    The new direction is ``-g + (|g|^2 / |g_old|^2) d_old``. It restarts
    from ``-g`` whenever that combination is not a descent direction.
    """

    def get_updated_direction(
        self, problem: Problem, gold2: float, old_gradient: Array
    ) -> Array:
        gradient = self.line_search.last_gradient
        if gold2 == 0.0:
            return -gradient
        direction = -gradient + (problem.gradient_norm_value / gold2) * self.line_search.search_direction
        if np.dot(direction, gradient) >= 0.0:
            logger.debug("ConjugateGradient: not a descent direction, restarting")
            return -gradient
        return direction


__all__ = ["SteepestDescent", "ConjugateGradient"]
