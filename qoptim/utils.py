"""Utility helpers for vector coercion and finite differences.

The derivative helpers perturb one component at a time and restore it
exactly before moving on, so no rounding drift accumulates in the point.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .core import FINITE_DIFFERENCE_EPSILON, Array, Objective, Residuals


def as_vector(x: Array | Sequence[float] | float, name: str = "x") -> Array:
    """Return a fresh 1-D float copy of ``x``."""
    arr = np.array(x, dtype=float, copy=True)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


def check_same_size(a: Array, b: Array, what: str) -> None:
    if a.shape[0] != b.shape[0]:
        raise ValueError(
            f"{what} size ({a.shape[0]}) not equal to params size ({b.shape[0]})"
        )


def approx_grad(
    fun: Objective, x: Array, eps: float = FINITE_DIFFERENCE_EPSILON
) -> Array:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = as_vector(x)
    xx = x.copy()
    grad = np.zeros_like(x)
    for i in range(x.size):
        xx[i] += eps
        fp = fun(xx)
        xx[i] -= 2.0 * eps
        fm = fun(xx)
        grad[i] = 0.5 * (fp - fm) / eps
        xx[i] = x[i]
    return grad


def approx_jacobian(
    fun: Residuals, x: Array, eps: float = FINITE_DIFFERENCE_EPSILON
) -> Array:
    """Central-difference Jacobian of a vector function, shape ``(m, n)``."""
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = as_vector(x)
    xx = x.copy()
    columns = []
    for i in range(x.size):
        xx[i] += eps
        fp = np.asarray(fun(xx), dtype=float)
        xx[i] -= 2.0 * eps
        fm = np.asarray(fun(xx), dtype=float)
        columns.append(0.5 * (fp - fm) / eps)
        xx[i] = x[i]
    return np.column_stack(columns)


def simplex_size(vertices: Sequence[Array]) -> float:
    """Mean Euclidean distance of the vertices from their centroid."""
    points = np.asarray(vertices, dtype=float)
    center = points.mean(axis=0)
    return float(np.mean(np.linalg.norm(points - center, axis=1)))


__all__ = [
    "as_vector",
    "check_same_size",
    "approx_grad",
    "approx_jacobian",
    "simplex_size",
]
