import dataclasses

import pytest

from qoptim import EndCriteria, EndCriteriaType


def test_defaults():
    ec = EndCriteria(1000)
    assert ec.max_stationary_state_iterations == 100
    assert ec.gradient_norm_epsilon == ec.function_epsilon
    assert EndCriteria(40).max_stationary_state_iterations == 20
    assert EndCriteria.Type is EndCriteriaType


@pytest.mark.parametrize("max_iterations, max_stationary", [(100, 1), (100, 100), (10, 20)])
def test_invalid_stationary_budget(max_iterations, max_stationary):
    with pytest.raises(ValueError):
        EndCriteria(max_iterations, max_stationary)


def test_is_immutable():
    ec = EndCriteria(100, 10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        ec.max_iterations = 5


def test_check_max_iterations():
    ec = EndCriteria(10, 5)
    assert ec.check_max_iterations(9) == (False, EndCriteriaType.NONE)
    assert ec.check_max_iterations(10) == (True, EndCriteriaType.MAX_ITERATIONS)
    kept = ec.check_max_iterations(3, EndCriteriaType.STATIONARY_POINT)
    assert kept.ec_type is EndCriteriaType.STATIONARY_POINT


def test_stationary_function_value_waits_for_budget():
    ec = EndCriteria(100, 3, 1e-8, 1e-6)
    stationary = 0
    for _ in range(3):
        check = ec.check_stationary_function_value(1.0, 1.0, stationary)
        assert not check.triggered
        assert check.ec_type is EndCriteriaType.NONE
        stationary = check.stationary_iterations
    assert stationary == 3
    check = ec.check_stationary_function_value(1.0, 1.0, stationary)
    assert check.triggered
    assert check.ec_type is EndCriteriaType.STATIONARY_FUNCTION_VALUE
    assert check.stationary_iterations == 4


def test_stationary_counter_resets_on_progress():
    ec = EndCriteria(100, 3, 1e-8, 1e-6)
    check = ec.check_stationary_function_value(1.0, 1.0, 3)
    assert check.triggered
    check = ec.check_stationary_function_value(1.0, 1.0 + 1e-5, 3)
    assert not check.triggered
    assert check.stationary_iterations == 0


def test_stationary_point_uses_root_epsilon():
    ec = EndCriteria(100, 2, 1e-4, 1e-12)
    assert ec.check_stationary_point(0.0, 1e-5, 2).triggered
    assert not ec.check_stationary_point(0.0, 1e-3, 2).triggered
    assert (
        ec.check_stationary_point(0.0, 1e-5, 2).ec_type is EndCriteriaType.STATIONARY_POINT
    )


def test_stationary_function_accuracy_requires_positive_optimization():
    ec = EndCriteria(100, 10, 1e-8, 1e-6)
    assert not ec.check_stationary_function_accuracy(1e-9, False).triggered
    assert not ec.check_stationary_function_accuracy(1e-3, True).triggered
    check = ec.check_stationary_function_accuracy(1e-9, True)
    assert check == (True, EndCriteriaType.STATIONARY_FUNCTION_ACCURACY)


def test_zero_gradient_norm():
    ec = EndCriteria(100, 10, 1e-8, 1e-6, 1e-4)
    assert not ec.check_zero_gradient_norm(1e-3).triggered
    assert ec.check_zero_gradient_norm(1e-5) == (True, EndCriteriaType.ZERO_GRADIENT_NORM)


def test_value_combines_checks_in_order():
    ec = EndCriteria(10, 2, 1e-8, 1e-6, 1e-4)
    assert ec.value(10, 0, False, 1.0, 0.0, 1.0).ec_type is EndCriteriaType.MAX_ITERATIONS
    result = ec.value(1, 2, False, 1.0, 1.0, 1.0)
    assert result.ec_type is EndCriteriaType.STATIONARY_FUNCTION_VALUE
    result = ec.value(1, 0, True, 1.0, 1e-9, 1.0)
    assert result.ec_type is EndCriteriaType.STATIONARY_FUNCTION_ACCURACY
    result = ec.value(1, 0, False, 1.0, 0.5, 1e-5)
    assert result == (True, EndCriteriaType.ZERO_GRADIENT_NORM, 0)
    result = ec.value(1, 0, False, 1.0, 0.5, 1.0)
    assert result == (False, EndCriteriaType.NONE, 0)


def test_succeeded():
    assert EndCriteria.succeeded(EndCriteriaType.STATIONARY_POINT)
    assert EndCriteria.succeeded(EndCriteriaType.STATIONARY_FUNCTION_VALUE)
    assert EndCriteria.succeeded(EndCriteriaType.STATIONARY_FUNCTION_ACCURACY)
    assert not EndCriteria.succeeded(EndCriteriaType.MAX_ITERATIONS)
    assert not EndCriteria.succeeded(EndCriteriaType.ZERO_GRADIENT_NORM)
    assert not EndCriteria.succeeded(EndCriteriaType.NONE)
