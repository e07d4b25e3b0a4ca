"""Calibrate a two-factor decay model to noisy quotes.

The model ``a * exp(-b t) + c`` is fitted with Levenberg-Marquardt on all
three parameters, then again with the level ``c`` held fixed through a
projection and a BFGS refinement, and finally with Differential Evolution as
a global check.
"""

from __future__ import annotations

import numpy as np

from qoptim import (
    BFGS,
    CallableCostFunction,
    Configuration,
    DifferentialEvolution,
    EndCriteria,
    LevenbergMarquardt,
    NonhomogeneousBoundaryConstraint,
    PositiveConstraint,
    Problem,
    ProjectedConstraint,
    ProjectedCostFunction,
    Projection,
)

TRUE_PARAMS = np.array([2.0, 0.7, 0.5])


def model(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    return params[0] * np.exp(-params[1] * t) + params[2]


def main() -> None:
    rng = np.random.default_rng(1234)
    t = np.linspace(0.0, 5.0, 25)
    quotes = model(TRUE_PARAMS, t) + 0.01 * rng.normal(size=t.size)

    cost = CallableCostFunction(values_fn=lambda p: model(p, t) - quotes)
    end_criteria = EndCriteria(1000, 100, 1e-8, 1e-8)

    problem = Problem(cost, PositiveConstraint(), np.array([1.0, 1.0, 1.0]))
    ec_type = LevenbergMarquardt().minimize(problem, end_criteria)
    print(f"Levenberg-Marquardt ({ec_type.name}): {np.round(problem.current_value, 4)}")

    projection = Projection([1.0, 1.0, 0.5], fix_parameters=[False, False, True])
    projected = Problem(
        ProjectedCostFunction(cost, projection),
        ProjectedConstraint(PositiveConstraint(), projection),
        projection.project(np.array([1.0, 1.0, 0.5])),
    )
    ec_type = BFGS().minimize(projected, end_criteria)
    print(
        f"BFGS with fixed level ({ec_type.name}): "
        f"{np.round(projection.include(projected.current_value), 4)}"
    )

    bounds = NonhomogeneousBoundaryConstraint([0.1, 0.01, 0.0], [5.0, 3.0, 2.0])
    global_problem = Problem(cost, bounds, np.array([1.0, 1.0, 1.0]))
    de = DifferentialEvolution(
        Configuration().with_population_members(60).with_stepsize_weight(0.5).with_seed(7)
    )
    ec_type = de.minimize(global_problem, EndCriteria(200, 50, 1e-10, 1e-12))
    print(f"Differential Evolution ({ec_type.name}): {np.round(global_problem.current_value, 4)}")

    print(f"Final calibrated parameters: {np.round(problem.current_value, 4)}")


if __name__ == "__main__":
    main()
