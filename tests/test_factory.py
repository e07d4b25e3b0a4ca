"""Tests for the optimization method factory."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from qoptim import (
    BFGS,
    ArmijoLineSearch,
    BoundaryConstraint,
    ConjugateGradient,
    CrossoverType,
    DifferentialEvolution,
    EndCriteria,
    GoldsteinLineSearch,
    LevenbergMarquardt,
    MethodConfig,
    Problem,
    Simplex,
    SteepestDescent,
    Strategy,
    create_line_search,
    create_method,
)


@pytest.mark.parametrize(
    "name, cls",
    [
        ("simplex", Simplex),
        ("bfgs", BFGS),
        ("steepest_descent", SteepestDescent),
        ("conjugate_gradient", ConjugateGradient),
        ("levenberg_marquardt", LevenbergMarquardt),
        ("differential_evolution", DifferentialEvolution),
    ],
)
def test_create_each_method(name, cls) -> None:
    assert isinstance(create_method(MethodConfig(name=name)), cls)


def test_names_are_case_insensitive() -> None:
    assert isinstance(create_method(MethodConfig(name="BFGS")), BFGS)


def test_line_search_selection() -> None:
    method = create_method(MethodConfig(name="bfgs", line_search="goldstein"))
    assert isinstance(method.line_search, GoldsteinLineSearch)
    assert isinstance(create_method(MethodConfig(name="steepest_descent")).line_search, ArmijoLineSearch)
    assert isinstance(create_line_search("Armijo"), ArmijoLineSearch)


def test_settings_are_forwarded() -> None:
    simplex = create_method(MethodConfig(name="simplex", simplex_lambda=0.7))
    assert simplex.lambda_ == 0.7

    lm = create_method(
        MethodConfig(name="levenberg_marquardt", xtol=1e-6, use_cost_functions_jacobian=True)
    )
    assert lm.xtol == 1e-6
    assert lm.use_cost_functions_jacobian

    de = create_method(
        MethodConfig(
            name="differential_evolution",
            strategy="rand1_standard",
            crossover_type="EXPONENTIAL",
            population_members=12,
            seed=5,
        )
    )
    assert de.configuration.strategy is Strategy.RAND1_STANDARD
    assert de.configuration.crossover_type is CrossoverType.EXPONENTIAL
    assert de.configuration.population_members == 12
    assert de.configuration.seed == 5


@pytest.mark.parametrize(
    "config",
    [
        MethodConfig(name="newton"),
        MethodConfig(name="bfgs", line_search="wolfe"),
        MethodConfig(name="differential_evolution", strategy="best2bin"),
        MethodConfig(name="differential_evolution", crossover_type="uniform"),
        MethodConfig(name="differential_evolution", population_members=0),
        MethodConfig(name="simplex", simplex_lambda=-1.0),
    ],
)
def test_invalid_configurations(config) -> None:
    with pytest.raises(ValueError):
        create_method(config)


def test_config_is_frozen() -> None:
    config = MethodConfig(name="bfgs")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.name = "simplex"


@pytest.mark.parametrize("name", ["simplex", "bfgs", "conjugate_gradient", "differential_evolution"])
def test_created_methods_minimize(name, quadratic_bowl) -> None:
    method = create_method(MethodConfig(name=name, population_members=60))
    problem = Problem(quadratic_bowl([0.25, -0.25]), BoundaryConstraint(-1.0, 1.0), np.array([0.9, 0.9]))
    method.minimize(problem, EndCriteria(500, 50, 1e-8, 1e-10))
    assert problem.function_value < quadratic_bowl([0.25, -0.25]).value(np.array([0.9, 0.9]))


def test_differential_evolution_flags_are_forwarded() -> None:
    default = create_method(MethodConfig(name="differential_evolution"))
    assert default.configuration.apply_bounds
    assert not default.configuration.crossover_is_adaptive

    de = create_method(
        MethodConfig(
            name="differential_evolution",
            apply_bounds=False,
            crossover_is_adaptive=True,
        )
    )
    assert not de.configuration.apply_bounds
    assert de.configuration.crossover_is_adaptive
