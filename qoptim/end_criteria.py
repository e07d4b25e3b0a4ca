"""
Convergence policy shared by all optimization methods.

:class:`EndCriteria` is immutable; loop state such as the number of
consecutive stationary iterations stays with the caller and is threaded
through the checks, which return it updated. Each check also takes the
termination type found so far and returns it, changed only when the check
triggers.

Example:
    >>> from qoptim.end_criteria import EndCriteria, EndCriteriaType
    >>> ec = EndCriteria(100, 10, 1e-8, 1e-8)
    >>> ec.check_max_iterations(100)
    CheckResult(triggered=True, ec_type=<EndCriteriaType.MAX_ITERATIONS: 'max_iterations'>)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, NamedTuple, Optional


class EndCriteriaType(Enum):
    """Reason an optimization stopped."""

    NONE = "none"
    MAX_ITERATIONS = "max_iterations"
    STATIONARY_POINT = "stationary_point"
    STATIONARY_FUNCTION_VALUE = "stationary_function_value"
    STATIONARY_FUNCTION_ACCURACY = "stationary_function_accuracy"
    ZERO_GRADIENT_NORM = "zero_gradient_norm"
    UNKNOWN = "unknown"


class CheckResult(NamedTuple):
    triggered: bool
    ec_type: EndCriteriaType


class StationaryCheck(NamedTuple):
    triggered: bool
    ec_type: EndCriteriaType
    stationary_iterations: int


@dataclass(frozen=True)
class EndCriteria:
    """
    Criteria to end an optimization.

    Attributes:
        max_iterations: Iteration budget.
        max_stationary_state_iterations: Consecutive iterations allowed
            around a stationary point. Defaults to
            ``min(max_iterations // 2, 100)``; must lie strictly between 1
            and ``max_iterations``.
        root_epsilon: Tolerance on the variation of ``x``.
        function_epsilon: Tolerance on the variation (and value) of ``f``.
        gradient_norm_epsilon: Tolerance on the gradient norm. Defaults to
            ``function_epsilon``.
    """

    Type: ClassVar[type[EndCriteriaType]] = EndCriteriaType

    max_iterations: int
    max_stationary_state_iterations: Optional[int] = None
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_stationary_state_iterations is None:
            object.__setattr__(
                self,
                "max_stationary_state_iterations",
                min(self.max_iterations // 2, 100),
            )
        if self.max_stationary_state_iterations <= 1:
            raise ValueError(
                f"max_stationary_state_iterations ({self.max_stationary_state_iterations}) "
                "must be greater than one"
            )
        if self.max_stationary_state_iterations >= self.max_iterations:
            raise ValueError(
                f"max_stationary_state_iterations ({self.max_stationary_state_iterations}) "
                f"must be less than max_iterations ({self.max_iterations})"
            )
        if self.gradient_norm_epsilon is None:
            object.__setattr__(self, "gradient_norm_epsilon", self.function_epsilon)

    @staticmethod
    def succeeded(ec_type: EndCriteriaType) -> bool:
        """True for the termination types that denote convergence."""
        return ec_type in (
            EndCriteriaType.STATIONARY_POINT,
            EndCriteriaType.STATIONARY_FUNCTION_VALUE,
            EndCriteriaType.STATIONARY_FUNCTION_ACCURACY,
        )

    def check_max_iterations(
        self, iteration: int, ec_type: EndCriteriaType = EndCriteriaType.NONE
    ) -> CheckResult:
        if iteration < self.max_iterations:
            return CheckResult(False, ec_type)
        return CheckResult(True, EndCriteriaType.MAX_ITERATIONS)

    def check_stationary_point(
        self,
        x_old: float,
        x_new: float,
        stationary_iterations: int,
        ec_type: EndCriteriaType = EndCriteriaType.NONE,
    ) -> StationaryCheck:
        return self._check_stationary(
            abs(x_new - x_old) >= self.root_epsilon,
            stationary_iterations,
            ec_type,
            EndCriteriaType.STATIONARY_POINT,
        )

    def check_stationary_function_value(
        self,
        f_old: float,
        f_new: float,
        stationary_iterations: int,
        ec_type: EndCriteriaType = EndCriteriaType.NONE,
    ) -> StationaryCheck:
        return self._check_stationary(
            abs(f_new - f_old) >= self.function_epsilon,
            stationary_iterations,
            ec_type,
            EndCriteriaType.STATIONARY_FUNCTION_VALUE,
        )

    def _check_stationary(
        self,
        moved: bool,
        stationary_iterations: int,
        ec_type: EndCriteriaType,
        signal: EndCriteriaType,
    ) -> StationaryCheck:
        if moved:
            return StationaryCheck(False, ec_type, 0)
        stationary_iterations += 1
        if stationary_iterations <= self.max_stationary_state_iterations:
            return StationaryCheck(False, ec_type, stationary_iterations)
        return StationaryCheck(True, signal, stationary_iterations)

    def check_stationary_function_accuracy(
        self,
        f: float,
        positive_optimization: bool,
        ec_type: EndCriteriaType = EndCriteriaType.NONE,
    ) -> CheckResult:
        """Only meaningful when the objective is known to be non-negative."""
        if not positive_optimization or f >= self.function_epsilon:
            return CheckResult(False, ec_type)
        return CheckResult(True, EndCriteriaType.STATIONARY_FUNCTION_ACCURACY)

    def check_zero_gradient_norm(
        self, gradient_norm: float, ec_type: EndCriteriaType = EndCriteriaType.NONE
    ) -> CheckResult:
        if gradient_norm >= self.gradient_norm_epsilon:
            return CheckResult(False, ec_type)
        return CheckResult(True, EndCriteriaType.ZERO_GRADIENT_NORM)

    def value(
        self,
        iteration: int,
        stationary_iterations: int,
        positive_optimization: bool,
        f_old: float,
        f_new: float,
        gradient_norm: float,
        ec_type: EndCriteriaType = EndCriteriaType.NONE,
    ) -> StationaryCheck:
        """Short-circuit OR of the iteration, function and gradient checks."""
        check = self.check_max_iterations(iteration, ec_type)
        if check.triggered:
            return StationaryCheck(True, check.ec_type, stationary_iterations)
        stationary = self.check_stationary_function_value(
            f_old, f_new, stationary_iterations, ec_type
        )
        if stationary.triggered:
            return stationary
        stationary_iterations = stationary.stationary_iterations
        check = self.check_stationary_function_accuracy(
            f_new, positive_optimization, ec_type
        )
        if not check.triggered:
            check = self.check_zero_gradient_norm(gradient_norm, ec_type)
        return StationaryCheck(check.triggered, check.ec_type, stationary_iterations)


__all__ = ["EndCriteria", "EndCriteriaType", "CheckResult", "StationaryCheck"]
