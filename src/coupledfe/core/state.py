"""
Gauss-Point State
=================

Read-only snapshots handed to material evaluators, element kernels and
boundary integrators for a single Gauss point.

Index convention: field (dof) indices are 1-based. Index 1 addresses the first
field of the element kind (e.g. damage for the fracture element), so the
accessors below reject index 0.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Sequence, Tuple

from .errors import raise_logged

logger = logging.getLogger(__name__)


def _frozen_array(values, shape=None) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    if shape is not None and arr.shape != shape:
        raise_logged(logger, f"expected shape {shape}, got {arr.shape}")
    arr.flags.writeable = False
    return arr


def as_vector3(values: Sequence[float]) -> np.ndarray:
    """Pad a 1, 2 or 3 component vector to a read-only 3-vector."""
    v = np.asarray(values, dtype=np.float64).ravel()
    if v.size > 3:
        raise_logged(logger, f"vector has {v.size} components, at most 3 allowed")
    out = np.zeros(3)
    out[:v.size] = v
    out.flags.writeable = False
    return out


@dataclass(frozen=True)
class ElementInfo:
    """
    Element-level data for the current Gauss point.

    Attributes:
        n_dim: spatial dimension (1, 2 or 3)
        n_nodes: number of element nodes
        dt: time-step size
        t: current time
        elmt_id: element index (for diagnostics)
        gp_id: Gauss point index within the element (for diagnostics)
        gp_coords: physical coordinates of the Gauss point, shape (3,)
        volume: element volume (area in 2-D, length in 1-D)
    """
    n_dim: int
    n_nodes: int = 1
    dt: float = 1.0
    t: float = 0.0
    elmt_id: int = 0
    gp_id: int = 0
    gp_coords: np.ndarray = field(default_factory=lambda: np.zeros(3))
    volume: float = 0.0

    def __post_init__(self):
        if self.n_dim not in (1, 2, 3):
            raise_logged(logger, f"n_dim must be 1, 2 or 3, got {self.n_dim}")
        if self.dt <= 0:
            raise_logged(logger, f"dt must be positive, got {self.dt}")
        object.__setattr__(self, 'gp_coords', as_vector3(self.gp_coords))


@dataclass(frozen=True)
class ElementSolution:
    """
    Interpolated field values at the Gauss point.

    Attributes:
        gp_u: current field values, shape (n_dofs,)
        gp_v: current time derivatives, shape (n_dofs,)
        gp_grad_u: current spatial gradients, shape (n_dofs, 3)
        gp_u_old: converged values of the previous step, shape (n_dofs,)
        gp_v_old: converged rates of the previous step, shape (n_dofs,)
        gp_grad_u_old: converged gradients of the previous step, shape (n_dofs, 3)
    """
    gp_u: np.ndarray
    gp_v: np.ndarray
    gp_grad_u: np.ndarray
    gp_u_old: np.ndarray = None
    gp_v_old: np.ndarray = None
    gp_grad_u_old: np.ndarray = None

    def __post_init__(self):
        u = _frozen_array(self.gp_u).ravel()
        n = u.size
        object.__setattr__(self, 'gp_u', u)
        object.__setattr__(self, 'gp_v', _frozen_array(self.gp_v, (n,)))
        object.__setattr__(self, 'gp_grad_u', _frozen_array(self.gp_grad_u, (n, 3)))

        u_old = self.gp_u if self.gp_u_old is None else self.gp_u_old
        v_old = np.zeros(n) if self.gp_v_old is None else self.gp_v_old
        grad_old = self.gp_grad_u if self.gp_grad_u_old is None else self.gp_grad_u_old
        object.__setattr__(self, 'gp_u_old', _frozen_array(u_old, (n,)))
        object.__setattr__(self, 'gp_v_old', _frozen_array(v_old, (n,)))
        object.__setattr__(self, 'gp_grad_u_old', _frozen_array(grad_old, (n, 3)))

    @property
    def n_dofs(self) -> int:
        return self.gp_u.size

    def _index(self, i: int) -> int:
        if not 1 <= i <= self.n_dofs:
            raise_logged(
                logger,
                f"field index {i} out of range 1..{self.n_dofs} (indices are 1-based)")
        return i - 1

    def u(self, i: int) -> float:
        return float(self.gp_u[self._index(i)])

    def v(self, i: int) -> float:
        return float(self.gp_v[self._index(i)])

    def grad_u(self, i: int) -> np.ndarray:
        return self.gp_grad_u[self._index(i)]

    def u_old(self, i: int) -> float:
        return float(self.gp_u_old[self._index(i)])

    def grad_u_old(self, i: int) -> np.ndarray:
        return self.gp_grad_u_old[self._index(i)]

    def check_dimension(self, n_dim: int) -> None:
        """Gradient components beyond n_dim must vanish."""
        if np.any(self.gp_grad_u[:, n_dim:] != 0.0):
            raise_logged(
                logger,
                f"gradients carry components beyond n_dim={n_dim}")


@dataclass(frozen=True)
class ShapeFunctionData:
    """
    Test/trial shape function values and gradients at the Gauss point.

    In Galerkin form both are evaluated from the same basis; test belongs to
    the row node, trial to the column node.
    """
    test: float
    grad_test: np.ndarray
    trial: float = 0.0
    grad_trial: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        object.__setattr__(self, 'test', float(self.test))
        object.__setattr__(self, 'trial', float(self.trial))
        object.__setattr__(self, 'grad_test', as_vector3(self.grad_test))
        object.__setattr__(self, 'grad_trial', as_vector3(self.grad_trial))


def check_ctan(ctan: Sequence[float]) -> Tuple[float, float, float]:
    """
    Validate the time-integration coefficient vector.

    ctan[0] scales value terms, ctan[1] scales rate terms (dv/du),
    ctan[2] is reserved for second-order schemes.
    """
    if len(ctan) != 3:
        raise_logged(logger, f"ctan must have 3 entries, got {len(ctan)}")
    return float(ctan[0]), float(ctan[1]), float(ctan[2])
