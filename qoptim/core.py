"""Core aliases and numerical constants shared across qoptim."""

from __future__ import annotations

import sys
from typing import Callable

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Residuals = Callable[[Array], Array]
Gradient = Callable[[Array], Array]

#: Machine epsilon for doubles.
EPSILON = float(np.finfo(float).eps)

#: Largest finite double; used as the open bound of unbounded regions and as
#: the penalty cost of failed evaluations.
MAX_REAL = sys.float_info.max

#: Maximum number of step halvings tried when repairing an infeasible update.
MAX_STEP_HALVINGS = 200

#: Default perturbation of finite-difference derivatives.
FINITE_DIFFERENCE_EPSILON = 1e-8


__all__ = [
    "Array",
    "Objective",
    "Residuals",
    "Gradient",
    "EPSILON",
    "MAX_REAL",
    "MAX_STEP_HALVINGS",
    "FINITE_DIFFERENCE_EPSILON",
]
