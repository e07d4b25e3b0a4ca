"""
Levenberg-Marquardt least-squares minimizer.

Delegates to MINPACK through :func:`scipy.optimize.leastsq`: ``lmdif`` with a
forward-difference Jacobian by default, ``lmder`` with the cost function's own
:meth:`~qoptim.cost_function.CostFunction.jacobian` when
``use_cost_functions_jacobian`` is set. The cost function's :meth:`values`
are the residuals whose sum of squares is minimized.

MINPACK knows nothing about constraints. Trial points that fail the problem's
constraint are answered with the residuals (and Jacobian) of the initial
value, which steers the solver back toward the feasible region.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.optimize import leastsq

from .core import Array
from .end_criteria import EndCriteria, EndCriteriaType
from .logging import get_logger
from .method import OptimizationMethod
from .problem import Problem

logger = get_logger(__name__)


class LevenbergMarquardt(OptimizationMethod):
    """
    MINPACK Levenberg-Marquardt.

    Args:
        epsfcn: Step length of the forward-difference Jacobian.
        xtol: Relative error tolerance on the solution.
        gtol: Orthogonality tolerance between residuals and Jacobian columns.
        use_cost_functions_jacobian: Use ``CostFunction.jacobian`` (central
            differences unless overridden) instead of MINPACK's forward
            differences.

    The relative tolerance on the sum of squares is the end criteria's
    ``function_epsilon`` and the evaluation budget its ``max_iterations``.
    """

    # leastsq step bound factor; MINPACK's default is 100
    STEP_BOUND_FACTOR = 1.0

    def __init__(
        self,
        epsfcn: float = 1e-8,
        xtol: float = 1e-8,
        gtol: float = 1e-8,
        use_cost_functions_jacobian: bool = False,
    ) -> None:
        self.epsfcn = epsfcn
        self.xtol = xtol
        self.gtol = gtol
        self.use_cost_functions_jacobian = use_cost_functions_jacobian
        self.info = 0
        self._problem: Optional[Problem] = None
        self._init_cost_values: Array = np.zeros(0)
        self._init_jacobian: Optional[Array] = None

    def get_info(self) -> int:
        """MINPACK termination code of the last run (0 before any run)."""
        return self.info

    def _fcn(self, x: Array) -> Array:
        problem = self._problem
        if problem.constraint.test(x):
            return problem.values(np.array(x, dtype=float))
        logger.debug("LevenbergMarquardt: infeasible trial point, using initial residuals")
        return self._init_cost_values.copy()

    def _jac_fcn(self, x: Array) -> Array:
        problem = self._problem
        if problem.constraint.test(x):
            return problem.cost_function.jacobian(np.array(x, dtype=float))
        logger.debug("LevenbergMarquardt: infeasible trial point, using initial Jacobian")
        return self._init_jacobian.copy()

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        ec_type = EndCriteriaType.NONE
        problem.reset()
        x0 = problem.current_value.copy()
        self._problem = problem
        self._init_cost_values = np.asarray(problem.cost_function.values(x0), dtype=float)
        m = self._init_cost_values.size
        n = x0.size
        self._init_jacobian = None
        if self.use_cost_functions_jacobian:
            self._init_jacobian = np.asarray(problem.cost_function.jacobian(x0), dtype=float)

        if n <= 0:
            raise ValueError("no variables given")
        if m < n:
            raise ValueError(f"less functions ({m}) than available variables ({n})")
        if end_criteria.function_epsilon < 0.0:
            raise ValueError("negative f tolerance")
        if self.xtol < 0.0:
            raise ValueError("negative x tolerance")
        if self.gtol < 0.0:
            raise ValueError("negative g tolerance")
        if end_criteria.max_iterations <= 0:
            raise ValueError("null number of evaluations")

        logger.debug("LevenbergMarquardt: %d residuals, %d variables", m, n)
        x, _, infodict, message, info = leastsq(
            self._fcn,
            x0,
            Dfun=self._jac_fcn if self.use_cost_functions_jacobian else None,
            full_output=True,
            ftol=end_criteria.function_epsilon,
            xtol=self.xtol,
            gtol=self.gtol,
            maxfev=end_criteria.max_iterations,
            epsfcn=self.epsfcn,
            factor=self.STEP_BOUND_FACTOR,
        )
        self.info = int(info)
        nfev = int(infodict["nfev"])

        if self.info == 0:
            raise RuntimeError("MINPACK: improper input parameters")
        if self.info != 6:
            ec_type = EndCriteriaType.STATIONARY_FUNCTION_VALUE
        ec_type = end_criteria.check_max_iterations(nfev, ec_type).ec_type
        if self.info == 7:
            raise RuntimeError(
                "MINPACK: xtol is too small. no further improvement "
                "in the approximate solution x is possible."
            )
        if self.info == 8:
            raise RuntimeError(
                "MINPACK: gtol is too small. fvec is orthogonal to the "
                "columns of the jacobian to machine precision."
            )

        x = np.atleast_1d(np.asarray(x, dtype=float))
        problem.set_current_value(x)
        problem.set_function_value(problem.cost_function.value(x))
        logger.debug(
            "LevenbergMarquardt: stopped with %s (info=%d: %s) after %d evaluations, f=%.6g",
            ec_type.name,
            self.info,
            message,
            nfev,
            problem.function_value,
        )
        return ec_type


__all__ = ["LevenbergMarquardt"]
