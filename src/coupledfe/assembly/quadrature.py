"""Gauss quadrature rules on reference simplices and line facets."""

import logging
import numpy as np
from scipy.special import roots_legendre
from typing import Tuple

from ..core.errors import raise_logged

logger = logging.getLogger(__name__)


def line_rule(n_points: int = 2) -> Tuple[np.ndarray, np.ndarray]:
    """Gauss-Legendre rule on [-1, 1]."""
    if n_points < 1:
        raise_logged(logger, f"n_points must be positive, got {n_points}")
    points, weights = roots_legendre(n_points)
    return points, weights


def simplex_rule(n_dim: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Second-order rule on the reference simplex.

    Returns:
        points: shape (n_points, n_dim)
        weights: shape (n_points,), summing to the reference measure 1/n_dim!
    """
    if n_dim == 1:
        points, weights = roots_legendre(2)
        return (0.5 * (points + 1.0)).reshape(-1, 1), 0.5 * weights
    if n_dim == 2:
        points = np.array([[1 / 6, 1 / 6], [2 / 3, 1 / 6], [1 / 6, 2 / 3]])
        return points, np.full(3, 1 / 6)
    if n_dim == 3:
        a, b = 0.5854101966249685, 0.1381966011250105
        points = np.array([[b, b, b], [a, b, b], [b, a, b], [b, b, a]])
        return points, np.full(4, 1 / 24)
    raise_logged(logger, f"no quadrature rule for n_dim={n_dim}")
