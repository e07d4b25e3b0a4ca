"""Common interface of optimization methods."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .end_criteria import EndCriteria, EndCriteriaType
from .problem import Problem


class OptimizationMethod(ABC):
    """
    Minimizes a :class:`~qoptim.problem.Problem` in place.

    On return the problem's current value and function value hold the best
    point found; the returned type says why the method stopped.
    """

    @abstractmethod
    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        ...


__all__ = ["OptimizationMethod"]
