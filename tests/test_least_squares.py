import numpy as np
import pytest

from qoptim import (
    BFGS,
    EndCriteriaType,
    LeastSquareFunction,
    LeastSquareProblem,
    LevenbergMarquardt,
    NoConstraint,
    NonLinearLeastSquare,
    PositiveConstraint,
    Simplex,
)


class LinearFit(LeastSquareProblem):
    """Data from ``y = 0.9448 + 2.6853 x`` style regression."""

    def __init__(self, analytic: bool = False) -> None:
        self.x = np.array([2.4, 1.8, 2.5, 3.0, 2.1, 1.2, 2.0, 2.7, 3.6])
        self.y = np.array([7.8, 5.5, 8.0, 9.0, 6.5, 4.0, 6.3, 8.4, 10.2])
        self.analytic = analytic

    def size(self):
        return self.x.size

    def target_and_value(self, p):
        return self.y, p[0] + p[1] * self.x

    def target_value_and_gradient(self, p):
        if not self.analytic:
            return super().target_value_and_gradient(p)
        jacobian = np.column_stack([np.ones_like(self.x), self.x])
        return self.y, p[0] + p[1] * self.x, jacobian


def test_least_square_function():
    problem = LinearFit(analytic=True)
    cost = LeastSquareFunction(problem)
    p = np.array([1.0, 2.0])
    residuals = problem.y - (1.0 + 2.0 * problem.x)
    assert np.allclose(cost.values(p), residuals)
    assert cost.value(p) == pytest.approx(residuals @ residuals)
    jac = np.column_stack([np.ones_like(problem.x), problem.x])
    assert np.allclose(cost.gradient(p), -2.0 * jac.T @ residuals)


def test_finite_difference_gradient_matches_analytic():
    p = np.array([0.3, 1.7])
    analytic = LeastSquareFunction(LinearFit(analytic=True)).gradient(p)
    numeric = LeastSquareFunction(LinearFit(analytic=False)).gradient(p)
    assert np.allclose(analytic, numeric, atol=1e-5)


def test_mismatched_target_and_fit_sizes():
    class Broken(LinearFit):
        def target_and_value(self, p):
            return self.y[:-1], p[0] + p[1] * self.x

    with pytest.raises(ValueError, match="target size"):
        LeastSquareFunction(Broken()).values(np.zeros(2))


class CenteredLine(LeastSquareProblem):
    x = np.array([-2.0, -1.0, 0.0, 1.0, 2.0])

    def size(self):
        return self.x.size

    def target_and_value(self, p):
        return 1.0 + 3.0 * self.x, p[0] + p[1] * self.x


def test_default_conjugate_gradient_recovers_line():
    solver = NonLinearLeastSquare(NoConstraint(), accuracy=1e-10, max_iterations=1000)
    solver.set_initial_value(np.zeros(2))
    result = solver.perform(CenteredLine())
    assert np.allclose(result, [1.0, 3.0], atol=1e-6)
    assert np.array_equal(solver.results, result)
    assert solver.residual_norm == solver.last_value
    assert solver.exit_flag is not EndCriteriaType.NONE
    assert solver.iterations_done > 0


@pytest.mark.parametrize("method", [BFGS(), Simplex(0.5), LevenbergMarquardt()])
def test_any_method_can_drive_the_fit(method):
    solver = NonLinearLeastSquare(PositiveConstraint(), accuracy=1e-10, max_iterations=5000, method=method)
    solver.set_initial_value(np.array([1.0, 1.0]))
    result = solver.perform(LinearFit(analytic=True))
    assert np.allclose(result, [0.9448, 2.6853], atol=1e-3)


def test_perform_requires_initial_value():
    with pytest.raises(ValueError, match="initial value not set"):
        NonLinearLeastSquare(NoConstraint()).perform(LinearFit())
