"""
Jacobian Verification
=====================

Finite-difference check of the analytic element Jacobian against the
element residual.
"""

import logging
import numpy as np
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.material_bag import MaterialBag
from .element_assembler import ElementAssembler

logger = logging.getLogger(__name__)


def finite_difference_jacobian(residual_fn: Callable[[np.ndarray], np.ndarray],
                               x: np.ndarray, step: float = 1e-7) -> np.ndarray:
    """
    Central-difference Jacobian dR/dx.

    Args:
        residual_fn: x -> R(x)
        x: expansion point, shape (n,)
        step: relative perturbation, h_j = step * max(1, |x_j|)

    Returns:
        J: shape (len(R), n)
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    r0 = np.asarray(residual_fn(x))
    J = np.zeros((r0.size, x.size))
    for j in range(x.size):
        h = step * max(1.0, abs(x[j]))
        xp = x.copy()
        xm = x.copy()
        xp[j] += h
        xm[j] -= h
        J[:, j] = (residual_fn(xp) - residual_fn(xm)) / (2 * h)
    return J


def verify_jacobian_consistency(assembler: ElementAssembler, nodes: np.ndarray,
                                u: np.ndarray, u_old: Optional[np.ndarray] = None,
                                ctan: Sequence[float] = (1.0, 0.0, 0.0), dt: float = 1.0,
                                old_bags: Optional[List[MaterialBag]] = None,
                                rtol: Optional[float] = None) -> Tuple[bool, float]:
    """
    Compare the assembled Jacobian with a finite-difference Jacobian.

    The old state (u_old, old_bags) is held fixed while u is perturbed.

    Args:
        assembler: ElementAssembler instance
        nodes: element node coordinates
        u: nodal solution at which to check
        u_old: previous converged nodal solution (defaults to u)
        ctan: time-integration coefficients
        dt: time step
        old_bags: previous converged material bags
        rtol: relative tolerance (defaults to assembler.config.rtol)

    Returns:
        (consistent, relative_error) with
        relative_error = ||K - K_fd||_F / ||K_fd||_F
    """
    rtol = assembler.config.rtol if rtol is None else rtol
    u = np.asarray(u, dtype=np.float64)
    shape = u.shape
    u_old = u.copy() if u_old is None else np.asarray(u_old, dtype=np.float64)
    if old_bags is None:
        old_bags = assembler.initialize(nodes, u_old)

    def residual(x):
        return assembler.evaluate(nodes, x.reshape(shape), u_old, ctan, dt,
                                  old_bags=old_bags).residual

    K = assembler.evaluate(nodes, u, u_old, ctan, dt, old_bags=old_bags).jacobian
    K_fd = finite_difference_jacobian(residual, u.ravel(), assembler.config.fd_step)

    norm = np.linalg.norm(K_fd)
    diff = np.linalg.norm(K - K_fd)
    rel_error = diff / norm if norm > 0 else diff
    consistent = rel_error < rtol
    logger.info("%s/%s Jacobian check: relative error %.3e (rtol %.1e)",
                assembler.element.kind, assembler.material.kind, rel_error, rtol)
    return consistent, rel_error
