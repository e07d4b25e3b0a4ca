import numpy as np
import pytest

from qoptim import (
    BoundaryConstraint,
    CompositeConstraint,
    NoConstraint,
    NonhomogeneousBoundaryConstraint,
    PositiveConstraint,
)
from qoptim.core import MAX_REAL


def test_positive_constraint_scenario():
    c = PositiveConstraint()
    assert c.test(np.array([1.0, -0.1])) is False
    assert c.test(np.array([1.0, 0.1])) is True
    assert np.array_equal(c.lower_bound(np.array([1.0, 1.0])), np.zeros(2))
    assert np.all(c.upper_bound(np.array([1.0, 1.0])) == MAX_REAL)


def test_positive_constraint_excludes_zero():
    assert PositiveConstraint().test(np.array([0.0, 1.0])) is False


def test_no_constraint_is_unbounded():
    c = NoConstraint()
    p = np.array([-1e300, 0.0, 1e300])
    assert c.test(p)
    assert np.all(c.lower_bound(p) == -MAX_REAL)
    assert np.all(c.upper_bound(p) == MAX_REAL)
    assert not c.empty()


def test_boundary_constraint_is_inclusive():
    c = BoundaryConstraint(-1.0, 2.0)
    assert c.test(np.array([-1.0, 2.0, 0.5]))
    assert not c.test(np.array([-1.0, 2.0 + 1e-12]))


def test_boundary_constraint_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        BoundaryConstraint(1.0, 0.0)


@pytest.mark.parametrize(
    "constraint",
    [
        BoundaryConstraint(-3.0, 5.0),
        NonhomogeneousBoundaryConstraint([0.0, -1.0, 2.0], [1.0, 1.0, 10.0]),
        CompositeConstraint(BoundaryConstraint(0.0, 4.0), BoundaryConstraint(1.0, 6.0)),
    ],
)
def test_midpoint_of_bounds_is_feasible(constraint):
    p = np.array([0.5, 0.5, 3.0])
    mid = 0.5 * (constraint.lower_bound(p) + constraint.upper_bound(p))
    assert constraint.test(mid)


def test_composite_bounds_are_intersection(rng):
    for _ in range(20):
        a, b, c, d = rng.uniform(-10.0, 10.0, size=4)
        c1 = BoundaryConstraint(min(a, b), max(a, b))
        c2 = BoundaryConstraint(min(c, d), max(c, d))
        composite = CompositeConstraint(c1, c2)
        p = np.zeros(3)
        assert np.array_equal(
            composite.upper_bound(p), np.minimum(c1.upper_bound(p), c2.upper_bound(p))
        )
        assert np.array_equal(
            composite.lower_bound(p), np.maximum(c1.lower_bound(p), c2.lower_bound(p))
        )


def test_composite_test_is_conjunction():
    composite = CompositeConstraint(PositiveConstraint(), BoundaryConstraint(-1.0, 1.0))
    assert composite.test(np.array([0.5]))
    assert not composite.test(np.array([-0.5]))
    assert not composite.test(np.array([1.5]))


def test_nonhomogeneous_constraint_checks_sizes():
    with pytest.raises(ValueError):
        NonhomogeneousBoundaryConstraint([0.0, 0.0], [1.0])
    c = NonhomogeneousBoundaryConstraint([0.0, 0.0], [1.0, 1.0])
    with pytest.raises(ValueError):
        c.test(np.array([0.5]))


def test_update_halves_step_until_feasible():
    c = BoundaryConstraint(0.0, 1.0)
    params = np.array([0.5])
    new_params, beta = c.update(params, np.array([1.0]), 2.0)
    assert beta == 0.5
    assert np.allclose(new_params, [1.0])
    assert c.test(new_params)
    assert params[0] == 0.5


def test_update_keeps_feasible_step():
    new_params, beta = NoConstraint().update(np.array([1.0]), np.array([-1.0]), 3.0)
    assert beta == 3.0
    assert np.allclose(new_params, [-2.0])


def test_update_gives_up_after_too_many_halvings():
    # infeasible start moving away from the region
    c = BoundaryConstraint(-1.0, 0.0)
    with pytest.raises(RuntimeError, match="can't update parameter vector"):
        c.update(np.array([1.0]), np.array([1.0]), 1.0)


def test_bounds_size_is_checked():
    class BadConstraint(NoConstraint):
        def _upper_bound(self, params):
            return np.zeros(params.shape[0] + 1)

    with pytest.raises(ValueError, match="upper bound size"):
        BadConstraint().upper_bound(np.zeros(2))
