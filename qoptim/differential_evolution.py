"""
Differential Evolution global optimizer.

The algorithm and strategy names follow

    Price, K., Storn, R., 1997. Differential Evolution - A Simple and
    Efficient Heuristic for Global Optimization over Continuous Spaces.
    Journal of Global Optimization, Vol. 11, pp. 341-359.

Seven strategies build the mutant population from difference vectors of
shuffled copies of the current population; three crossover types turn the
crossover probability into a per-component mutation probability. The
self-adaptive variants follow Brest, J. et al., 2006, "Self-Adapting Control
Parameters in Differential Evolution".

All randomness comes from a Mersenne Twister seeded with
:attr:`Configuration.seed` at the start of every :meth:`minimize` call, so a
run is reproducible for a fixed seed and cost function.

Example:
    >>> import numpy as np
    >>> from qoptim import BoundaryConstraint, CallableCostFunction, EndCriteria, Problem
    >>> from qoptim.differential_evolution import Configuration, DifferentialEvolution
    >>> cost = CallableCostFunction(value_fn=lambda x: float(np.sum(x**2)))
    >>> problem = Problem(cost, BoundaryConstraint(-10.0, 10.0), np.full(3, 5.0))
    >>> de = DifferentialEvolution(Configuration().with_population_members(50))
    >>> ec_type = de.minimize(problem, EndCriteria(100, 10, 1e-10, 1e-8))
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .core import MAX_REAL, Array, Objective
from .end_criteria import EndCriteria, EndCriteriaType
from .logging import get_logger
from .method import OptimizationMethod
from .problem import Problem

logger = get_logger(__name__)

Population = list["Candidate"]


class Strategy(Enum):
    """Construction rule of the mutant population."""

    RAND1_STANDARD = "rand1_standard"
    BEST_MEMBER_WITH_JITTER = "best_member_with_jitter"
    CURRENT_TO_BEST_2_DIFFS = "current_to_best_2_diffs"
    RAND1_DIFF_WITH_PER_VECTOR_DITHER = "rand1_diff_with_per_vector_dither"
    RAND1_DIFF_WITH_DITHER = "rand1_diff_with_dither"
    EITHER_OR_WITH_OPTIMAL_RECOMBINATION = "either_or_with_optimal_recombination"
    RAND1_SELFADAPTIVE_WITH_ROTATION = "rand1_selfadaptive_with_rotation"


class CrossoverType(Enum):
    """Mapping from crossover probability to mutation probability."""

    NORMAL = "normal"
    BINOMIAL = "binomial"
    EXPONENTIAL = "exponential"


@dataclass
class Candidate:
    """A population member and its cost."""

    values: Array
    cost: float = 0.0

    def copy(self) -> "Candidate":
        return Candidate(self.values.copy(), self.cost)


@dataclass
class Configuration:
    """
    Differential Evolution settings.

    The ``with_*`` methods validate, update in place and return the
    configuration so that settings can be chained.

    Args:
        strategy: Mutant construction rule.
        crossover_type: Crossover probability mapping.
        population_members: Population size, positive.
        stepsize_weight: Difference-vector weight, in ``[0, 2]``.
        crossover_probability: In ``[0, 1]``.
        seed: Seed of the Mersenne Twister.
        apply_bounds: Reflect components that leave the constraint's bounds.
        crossover_is_adaptive: Self-adapt crossover probabilities per member.
    """

    strategy: Strategy = Strategy.BEST_MEMBER_WITH_JITTER
    crossover_type: CrossoverType = CrossoverType.NORMAL
    population_members: int = 100
    stepsize_weight: float = 0.2
    crossover_probability: float = 0.9
    seed: int = 0
    apply_bounds: bool = True
    crossover_is_adaptive: bool = False

    def __post_init__(self) -> None:
        _check_population_members(self.population_members)
        _check_stepsize_weight(self.stepsize_weight)
        _check_crossover_probability(self.crossover_probability)

    def with_strategy(self, strategy: Strategy) -> "Configuration":
        self.strategy = Strategy(strategy)
        return self

    def with_crossover_type(self, crossover_type: CrossoverType) -> "Configuration":
        self.crossover_type = CrossoverType(crossover_type)
        return self

    def with_population_members(self, n: int) -> "Configuration":
        _check_population_members(n)
        self.population_members = n
        return self

    def with_stepsize_weight(self, w: float) -> "Configuration":
        _check_stepsize_weight(w)
        self.stepsize_weight = w
        return self

    def with_crossover_probability(self, p: float) -> "Configuration":
        _check_crossover_probability(p)
        self.crossover_probability = p
        return self

    def with_seed(self, seed: int) -> "Configuration":
        self.seed = seed
        return self

    def with_bounds(self, apply: bool = True) -> "Configuration":
        self.apply_bounds = apply
        return self

    def with_adaptive_crossover(self, adaptive: bool = True) -> "Configuration":
        self.crossover_is_adaptive = adaptive
        return self


def _check_population_members(n: int) -> None:
    if n <= 0:
        raise ValueError("Positive number of population members required")


def _check_stepsize_weight(w: float) -> None:
    if not (0.0 <= w <= 2.0):
        raise ValueError(f"Step size weight ({w}) must be in [0,2] range")


def _check_crossover_probability(p: float) -> None:
    if not (0.0 <= p <= 1.0):
        raise ValueError(f"Crossover probability ({p}) must be in [0,1] range")


def _evaluate(objective: Objective, values: Array) -> Optional[float]:
    """Cost at ``values``, or None when the evaluation raised."""
    try:
        return float(objective(values))
    except Exception as exc:  # noqa: BLE001 - any failure is penalised
        logger.debug("DifferentialEvolution: evaluation failed (%s)", exc)
        return None


def _penalised(cost: Optional[float]) -> float:
    if cost is None or not np.isfinite(cost):
        return MAX_REAL
    return cost


def _copy_population(population: Population) -> Population:
    return [member.copy() for member in population]


def _best(population: Population) -> Candidate:
    return min(population, key=lambda member: member.cost)


class DifferentialEvolution(OptimizationMethod):
    """Population-based stochastic minimizer.

    Bounds of the search region are taken from the problem's constraint at
    the initial value; the initial population is the initial value plus
    members drawn uniformly within those bounds.
    """

    # Brest et al. self-adaptation parameters: F_l, F_u and tau1 = tau2.
    SIZE_WEIGHT_LOWER_BOUND = 0.1
    SIZE_WEIGHT_UPPER_BOUND = 0.9
    ADAPTATION_PROBABILITY = 0.1

    def __init__(self, configuration: Optional[Configuration] = None) -> None:
        self.configuration = configuration if configuration is not None else Configuration()
        self.best_member_ever: Optional[Candidate] = None
        self.best_member_history: list[Candidate] = []
        self._rng = np.random.Generator(np.random.MT19937(self.configuration.seed))
        self._upper_bound: Array = np.zeros(0)
        self._lower_bound: Array = np.zeros(0)
        self._curr_gen_size_weights: Array = np.zeros(0)
        self._curr_gen_crossover: Array = np.zeros(0)

    def minimize(self, problem: Problem, end_criteria: EndCriteria) -> EndCriteriaType:
        config = self.configuration
        ec_type = EndCriteriaType.NONE
        problem.reset()
        self._rng = np.random.Generator(np.random.MT19937(config.seed))

        self._upper_bound = problem.constraint.upper_bound(problem.current_value)
        self._lower_bound = problem.constraint.lower_bound(problem.current_value)
        with np.errstate(over="ignore"):
            span = self._upper_bound - self._lower_bound
        if not np.all(np.isfinite(span)):
            raise ValueError("finite constraint bounds required to draw the initial population")
        self._curr_gen_size_weights = np.full(config.population_members, config.stepsize_weight)
        self._curr_gen_crossover = np.full(config.population_members, config.crossover_probability)

        population = self._initial_population(problem)
        best = _best(population)
        f_old = best.cost
        self.best_member_ever = best.copy()
        self.best_member_history = [self.best_member_ever.copy()]
        logger.debug(
            "DifferentialEvolution: %s with %d members, initial best f=%.6g",
            config.strategy.name,
            config.population_members,
            f_old,
        )

        iteration = 0
        stationary_iterations = 0
        while True:
            check = end_criteria.check_max_iterations(iteration, ec_type)
            ec_type = check.ec_type
            if check.triggered:
                break
            iteration += 1

            population = self._next_generation(population, problem)

            best = _best(population)
            f_new = best.cost
            if f_new < self.best_member_ever.cost:
                self.best_member_ever = best.copy()
            self.best_member_history.append(self.best_member_ever.copy())

            stationary = end_criteria.check_stationary_function_value(
                f_old, f_new, stationary_iterations, ec_type
            )
            stationary_iterations, ec_type = stationary.stationary_iterations, stationary.ec_type
            if stationary.triggered:
                break
            f_old = f_new

        problem.set_current_value(self.best_member_ever.values)
        problem.set_function_value(self.best_member_ever.cost)
        logger.debug(
            "DifferentialEvolution: stopped with %s after %d generations, f=%.6g",
            ec_type.name,
            iteration,
            self.best_member_ever.cost,
        )
        return ec_type

    def _cost(self, problem: Problem, values: Array) -> float:
        return _penalised(_evaluate(problem.value, values))

    def _initial_population(self, problem: Problem) -> Population:
        n = problem.current_value.size
        first = problem.current_value.copy()
        population = [Candidate(first, self._cost(problem, first))]
        span = self._upper_bound - self._lower_bound
        for _ in range(1, self.configuration.population_members):
            values = np.empty(n)
            for i in range(n):
                values[i] = self._lower_bound[i] + span[i] * self._rng.random()
            population.append(Candidate(values, self._cost(problem, values)))
        return population

    def _adapt_size_weights(self) -> None:
        for i in range(self._curr_gen_size_weights.size):
            if self._rng.random() < self.ADAPTATION_PROBABILITY:
                self._curr_gen_size_weights[i] = (
                    self.SIZE_WEIGHT_LOWER_BOUND
                    + self._rng.random() * self.SIZE_WEIGHT_UPPER_BOUND
                )

    def _adapt_crossover(self) -> None:
        for i in range(self._curr_gen_crossover.size):
            if self._rng.random() < self.ADAPTATION_PROBABILITY:
                self._curr_gen_crossover[i] = self._rng.random()

    def _shuffled(self, population: Population) -> Population:
        self._rng.shuffle(population)
        return _copy_population(population)

    def _next_generation(self, population: Population, problem: Problem) -> Population:
        config = self.configuration
        strategy = config.strategy
        weight = config.stepsize_weight
        best = self.best_member_ever
        old_population = _copy_population(population)
        population = _copy_population(population)

        if strategy is Strategy.RAND1_STANDARD:
            shuffled1 = self._shuffled(population)
            shuffled2 = self._shuffled(population)
            self._rng.shuffle(population)
            mirror = _copy_population(shuffled1)
            for i, member in enumerate(population):
                member.values = member.values + weight * (shuffled1[i].values - shuffled2[i].values)

        elif strategy is Strategy.BEST_MEMBER_WITH_JITTER:
            shuffled1 = self._shuffled(population)
            self._rng.shuffle(population)
            n = population[0].values.size
            for i, member in enumerate(population):
                jitter = np.array([self._rng.random() for _ in range(n)])
                member.values = best.values + (shuffled1[i].values - member.values) * (
                    0.0001 * jitter + weight
                )
            mirror = [best.copy() for _ in population]

        elif strategy is Strategy.CURRENT_TO_BEST_2_DIFFS:
            shuffled1 = self._shuffled(population)
            self._rng.shuffle(population)
            for i, member in enumerate(population):
                old = old_population[i].values
                member.values = (
                    old
                    + weight * (best.values - old)
                    + weight * (member.values - shuffled1[i].values)
                )
            mirror = _copy_population(shuffled1)

        elif strategy is Strategy.RAND1_DIFF_WITH_PER_VECTOR_DITHER:
            shuffled1 = self._shuffled(population)
            shuffled2 = self._shuffled(population)
            self._rng.shuffle(population)
            mirror = _copy_population(shuffled1)
            n = population[0].values.size
            f_weight = np.array([(1.0 - weight) * self._rng.random() + weight for _ in range(n)])
            for i, member in enumerate(population):
                member.values = member.values + f_weight * (shuffled1[i].values - shuffled2[i].values)

        elif strategy is Strategy.RAND1_DIFF_WITH_DITHER:
            shuffled1 = self._shuffled(population)
            shuffled2 = self._shuffled(population)
            self._rng.shuffle(population)
            mirror = _copy_population(shuffled1)
            f_weight = (1.0 - weight) * self._rng.random() + weight
            for i, member in enumerate(population):
                member.values = member.values + f_weight * (shuffled1[i].values - shuffled2[i].values)

        elif strategy is Strategy.EITHER_OR_WITH_OPTIMAL_RECOMBINATION:
            shuffled1 = self._shuffled(population)
            shuffled2 = self._shuffled(population)
            self._rng.shuffle(population)
            mirror = _copy_population(shuffled1)
            if self._rng.random() < 0.5:
                for i, member in enumerate(population):
                    member.values = old_population[i].values + weight * (
                        shuffled1[i].values - shuffled2[i].values
                    )
            else:
                k = 0.5 * (weight + 1.0)
                for i, member in enumerate(population):
                    member.values = old_population[i].values + k * (
                        shuffled1[i].values - shuffled2[i].values - 2.0 * member.values
                    )

        elif strategy is Strategy.RAND1_SELFADAPTIVE_WITH_ROTATION:
            shuffled1 = self._shuffled(population)
            shuffled2 = self._shuffled(population)
            self._rng.shuffle(population)
            mirror = _copy_population(shuffled1)
            self._adapt_size_weights()
            for i, member in enumerate(population):
                if self._rng.random() < 0.1:
                    member.values = self._rng.permutation(best.values)
                else:
                    member.values = best.values + self._curr_gen_size_weights[i] * (
                        shuffled1[i].values - shuffled2[i].values
                    )

        else:
            raise ValueError(f"Unknown strategy ({strategy})")

        self._crossover(old_population, population, mirror, problem)
        return population

    def _mutation_probabilities(self, n: int) -> Array:
        crossover = self._curr_gen_crossover
        crossover_type = self.configuration.crossover_type
        if crossover_type is CrossoverType.NORMAL:
            return crossover.copy()
        if crossover_type is CrossoverType.BINOMIAL:
            return crossover * (1.0 - 1.0 / n) + 1.0 / n
        if crossover_type is CrossoverType.EXPONENTIAL:
            # the limit at crossover == 1 is 1
            safe = np.where(crossover < 1.0, crossover, 0.0)
            return np.where(
                crossover < 1.0, (1.0 - safe**n) / (n * (1.0 - safe)), 1.0
            )
        raise ValueError(f"Unknown crossover type ({crossover_type})")

    def _crossover(
        self,
        old_population: Population,
        population: Population,
        mirror_population: Population,
        problem: Problem,
    ) -> None:
        """Mix old and mutant members in place, apply bounds and evaluate.

        ``population`` holds the mutants on entry and the trial members on
        return.
        """
        if self.configuration.crossover_is_adaptive:
            self._adapt_crossover()

        n = population[0].values.size
        probabilities = self._mutation_probabilities(n)

        masks = np.empty((len(population), n), dtype=bool)
        for i in range(len(population)):
            for j in range(n):
                masks[i, j] = self._rng.random() < probabilities[i]

        for i, member in enumerate(population):
            values = np.where(masks[i], member.values, old_population[i].values)
            if self.configuration.apply_bounds:
                mirror = mirror_population[i].values
                for j in range(n):
                    if values[j] > self._upper_bound[j]:
                        values[j] = self._upper_bound[j] + self._rng.random() * (
                            mirror[j] - self._upper_bound[j]
                        )
                    if values[j] < self._lower_bound[j]:
                        values[j] = self._lower_bound[j] + self._rng.random() * (
                            mirror[j] - self._lower_bound[j]
                        )
            member.values = values
            member.cost = self._cost(problem, values)


__all__ = [
    "Candidate",
    "Configuration",
    "CrossoverType",
    "DifferentialEvolution",
    "Strategy",
]
