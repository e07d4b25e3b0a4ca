"""Factory for creating optimization methods from configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .differential_evolution import Configuration, CrossoverType, DifferentialEvolution, Strategy
from .gradient import ConjugateGradient, SteepestDescent
from .levenberg_marquardt import LevenbergMarquardt
from .line_search import ArmijoLineSearch, GoldsteinLineSearch, LineSearch
from .method import OptimizationMethod
from .quasi_newton import BFGS
from .simplex import Simplex

METHOD_NAMES = (
    "simplex",
    "bfgs",
    "steepest_descent",
    "conjugate_gradient",
    "levenberg_marquardt",
    "differential_evolution",
)
LINE_SEARCH_NAMES = ("armijo", "goldstein")


@dataclass(frozen=True)
class MethodConfig:
    """
    Configuration for creating an optimization method.

    Fields a method does not use are ignored.

    Args:
        name: Method name, case-insensitive. Supported values: "simplex",
            "bfgs", "steepest_descent", "conjugate_gradient",
            "levenberg_marquardt", "differential_evolution".
        line_search: Line search of the gradient methods, "armijo" or
            "goldstein". Defaults to "armijo".
        simplex_lambda: Characteristic length of the initial simplex.
        epsfcn: Levenberg-Marquardt forward-difference step.
        xtol: Levenberg-Marquardt tolerance on the solution.
        gtol: Levenberg-Marquardt orthogonality tolerance.
        use_cost_functions_jacobian: Levenberg-Marquardt Jacobian source.
        strategy: Differential Evolution strategy name, e.g.
            "best_member_with_jitter".
        crossover_type: Differential Evolution crossover name.
        population_members: Differential Evolution population size.
        stepsize_weight: Differential Evolution step weight.
        crossover_probability: Differential Evolution crossover probability.
        seed: Differential Evolution seed.
        apply_bounds: Differential Evolution reflection of out-of-bounds
            components.
        crossover_is_adaptive: Differential Evolution self-adaptive crossover.
    """

    name: str
    line_search: str = "armijo"
    simplex_lambda: float = 0.1
    epsfcn: float = 1e-8
    xtol: float = 1e-8
    gtol: float = 1e-8
    use_cost_functions_jacobian: bool = False
    strategy: str = Strategy.BEST_MEMBER_WITH_JITTER.value
    crossover_type: str = CrossoverType.NORMAL.value
    population_members: int = 100
    stepsize_weight: float = 0.2
    crossover_probability: float = 0.9
    seed: int = 0
    apply_bounds: bool = True
    crossover_is_adaptive: bool = False


def create_line_search(name: str) -> LineSearch:
    """Create a line search by name ("armijo" or "goldstein")."""
    name_lower = name.lower()
    if name_lower == "armijo":
        return ArmijoLineSearch()
    elif name_lower == "goldstein":
        return GoldsteinLineSearch()
    else:
        raise ValueError(
            f"Unsupported line search name '{name}'. "
            f"Supported names: {list(LINE_SEARCH_NAMES)}"
        )


def create_method(config: MethodConfig) -> OptimizationMethod:
    """
    Create an optimization method from a configuration.

    Args:
        config: Method configuration.

    Returns:
        A fresh :class:`OptimizationMethod`.

    Raises:
        ValueError: If the method, line search, strategy or crossover name is
            not supported, or a numeric setting is out of range.
    """
    name_lower = config.name.lower()

    if name_lower == "simplex":
        return Simplex(config.simplex_lambda)
    elif name_lower == "bfgs":
        return BFGS(create_line_search(config.line_search))
    elif name_lower == "steepest_descent":
        return SteepestDescent(create_line_search(config.line_search))
    elif name_lower == "conjugate_gradient":
        return ConjugateGradient(create_line_search(config.line_search))
    elif name_lower == "levenberg_marquardt":
        return LevenbergMarquardt(
            epsfcn=config.epsfcn,
            xtol=config.xtol,
            gtol=config.gtol,
            use_cost_functions_jacobian=config.use_cost_functions_jacobian,
        )
    elif name_lower == "differential_evolution":
        try:
            strategy = Strategy(config.strategy.lower())
            crossover_type = CrossoverType(config.crossover_type.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported differential evolution setting: {exc}") from exc
        return DifferentialEvolution(
            Configuration(
                strategy=strategy,
                crossover_type=crossover_type,
                population_members=config.population_members,
                stepsize_weight=config.stepsize_weight,
                crossover_probability=config.crossover_probability,
                seed=config.seed,
                apply_bounds=config.apply_bounds,
                crossover_is_adaptive=config.crossover_is_adaptive,
            )
        )
    else:
        raise ValueError(
            f"Unsupported method name '{config.name}'. "
            f"Supported names: {list(METHOD_NAMES)}"
        )


__all__ = ["MethodConfig", "create_method", "create_line_search"]
