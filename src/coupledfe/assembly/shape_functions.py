"""
Linear Shape Functions
======================

P1 basis on simplices (2-node line, 3-node triangle, 4-node tetrahedron)
and on 2-node boundary line facets.

For the triangle the gradients reduce to the familiar CST form
    ∂N_i/∂x = b_i / (2A),   ∂N_i/∂y = c_i / (2A)
"""

import logging
import math
import numpy as np

from ..core.errors import raise_logged

logger = logging.getLogger(__name__)


class LinearSimplex:
    """
    Linear simplex element geometry.

    Attributes:
        nodes: shape (n_dim+1, n_dim), node coordinates
        n_dim: spatial dimension
        n_nodes: number of nodes
        jacobian: shape (n_dim, n_dim), dX/dξ
        measure: length / area / volume
        grads: shape (n_nodes, 3), constant shape function gradients (zero padded)
    """

    def __init__(self, nodes: np.ndarray):
        self.nodes = np.atleast_2d(np.asarray(nodes, dtype=np.float64))
        self.n_nodes, self.n_dim = self.nodes.shape
        if self.n_dim not in (1, 2, 3) or self.n_nodes != self.n_dim + 1:
            raise_logged(
                logger,
                f"nodes must have shape (n_dim+1, n_dim), got {self.nodes.shape}")

        X = self.nodes
        self.jacobian = (X[1:] - X[0]).T
        det = np.linalg.det(self.jacobian)
        self.measure = abs(det) / math.factorial(self.n_dim)
        scale = np.max(np.abs(X - X[0])) ** self.n_dim
        if scale == 0 or self.measure < 1e-12 * scale:
            raise_logged(logger, "Element has zero or negative measure (degenerate simplex)")

        # dN/dξ: N_0 = 1 - Σξ, N_i = ξ_i
        dN_dxi = np.vstack([-np.ones(self.n_dim), np.eye(self.n_dim)])
        grads = dN_dxi @ np.linalg.inv(self.jacobian)
        self.grads = np.zeros((self.n_nodes, 3))
        self.grads[:, :self.n_dim] = grads

    def values(self, xi: np.ndarray) -> np.ndarray:
        """Shape function values at reference point ξ, shape (n_nodes,)."""
        xi = np.asarray(xi, dtype=np.float64).ravel()
        return np.concatenate([[1.0 - xi.sum()], xi])

    def physical_point(self, xi: np.ndarray) -> np.ndarray:
        """Map reference point ξ to physical coordinates."""
        return self.nodes[0] + self.jacobian @ np.asarray(xi, dtype=np.float64).ravel()


class LineFacet:
    """
    Two-node boundary facet of a 2-D element, reference coordinate ξ ∈ [-1, 1].

    Attributes:
        nodes: shape (2, 2)
        length: facet length
        normal: unit normal (t_y, -t_x, 0), outward for counter-clockwise elements
    """

    n_nodes = 2

    def __init__(self, nodes: np.ndarray):
        self.nodes = np.asarray(nodes, dtype=np.float64)
        if self.nodes.shape != (2, 2):
            raise_logged(logger, f"facet nodes must have shape (2, 2), got {self.nodes.shape}")
        tangent = self.nodes[1] - self.nodes[0]
        self.length = float(np.linalg.norm(tangent))
        if self.length < 1e-15:
            raise_logged(logger, "Facet has zero length")
        t = tangent / self.length
        self.normal = np.array([t[1], -t[0], 0.0])

    def values(self, xi: float) -> np.ndarray:
        return np.array([0.5 * (1.0 - xi), 0.5 * (1.0 + xi)])

    def physical_point(self, xi: float) -> np.ndarray:
        return self.values(xi) @ self.nodes
