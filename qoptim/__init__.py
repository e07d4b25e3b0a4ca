"""qoptim - constrained nonlinear optimization for model calibration."""

__version__ = "0.1.0"

# Logging
from . import logging

# Feasible regions
from .constraint import (
    BoundaryConstraint,
    CompositeConstraint,
    Constraint,
    NoConstraint,
    NonhomogeneousBoundaryConstraint,
    PositiveConstraint,
)

# Objectives and problems
from .autograd import AutogradCostFunction
from .cost_function import CallableCostFunction, CostFunction
from .problem import Problem
from .projection import ProjectedConstraint, ProjectedCostFunction, Projection

# End criteria
from .end_criteria import CheckResult, EndCriteria, EndCriteriaType, StationaryCheck

# Optimization methods
from .differential_evolution import (
    Candidate,
    Configuration,
    CrossoverType,
    DifferentialEvolution,
    Strategy,
)
from .gradient import ConjugateGradient, SteepestDescent
from .levenberg_marquardt import LevenbergMarquardt
from .line_search import ArmijoLineSearch, GoldsteinLineSearch, LineSearch
from .line_search_method import LineSearchBasedMethod
from .method import OptimizationMethod
from .quasi_newton import BFGS
from .simplex import Simplex

# Least squares
from .least_squares import LeastSquareFunction, LeastSquareProblem, NonLinearLeastSquare

# Configuration
from .factory import MethodConfig, create_line_search, create_method

__all__ = [
    "__version__",
    "logging",
    # constraints
    "Constraint",
    "NoConstraint",
    "PositiveConstraint",
    "BoundaryConstraint",
    "NonhomogeneousBoundaryConstraint",
    "CompositeConstraint",
    "ProjectedConstraint",
    # objectives and problems
    "CostFunction",
    "CallableCostFunction",
    "AutogradCostFunction",
    "ProjectedCostFunction",
    "Projection",
    "Problem",
    # end criteria
    "EndCriteria",
    "EndCriteriaType",
    "CheckResult",
    "StationaryCheck",
    # methods
    "OptimizationMethod",
    "LineSearch",
    "ArmijoLineSearch",
    "GoldsteinLineSearch",
    "LineSearchBasedMethod",
    "SteepestDescent",
    "ConjugateGradient",
    "BFGS",
    "Simplex",
    "DifferentialEvolution",
    "Configuration",
    "Candidate",
    "Strategy",
    "CrossoverType",
    "LevenbergMarquardt",
    # least squares
    "LeastSquareProblem",
    "LeastSquareFunction",
    "NonLinearLeastSquare",
    # configuration
    "MethodConfig",
    "create_method",
    "create_line_search",
]
