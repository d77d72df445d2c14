"""
Element Kernel Base
===================

Single entry point for residual, Jacobian and projection evaluation at one
Gauss point, for one (test node, trial node) pair.

A kernel keeps no state between calls. It reads the Gauss-point state and
the two material bags, and writes only the entries of the local block it
owns. A 2-D kernel never touches the rows/columns of the third displacement
component, so a caller may hand it either the 2-D sized block or the full
3-D block layout.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Tuple

from ..core.buffers import LocalJacobian, LocalResidual
from ..core.calc_type import CalcType
from ..core.errors import ConfigurationError
from ..core.material_bag import MaterialBag, missing_keys
from ..core.state import ElementInfo, ElementSolution, ShapeFunctionData, check_ctan

logger = logging.getLogger(__name__)


class ElementBase(ABC):
    """
    Base class for element kernels.

    Subclasses set:
        kind: name used in diagnostics and in the factory
        n_fields: number of non-displacement fields placed before the displacements
        requires: slot name -> tuple of material keys read by the kernel
    """

    kind: str = "element"
    n_fields: int = 0
    requires: Dict[str, Tuple[str, ...]] = {}

    def n_dofs(self, n_dim: int) -> int:
        """Number of dofs per node: the extra fields plus one displacement per dimension."""
        return self.n_fields + n_dim

    def compute_all(self, calc_type: CalcType, elmt_info: ElementInfo,
                    ctan: Sequence[float], soln: ElementSolution,
                    shp: ShapeFunctionData, mate: MaterialBag, mate_old: MaterialBag,
                    local_k: Optional[np.ndarray] = None,
                    local_r: Optional[np.ndarray] = None) -> Optional[Dict[str, float]]:
        """
        Dispatch on the calculation type.

        Args:
            calc_type: CalcType.RESIDUAL, JACOBIAN or PROJECTION
            elmt_info: element information
            ctan: time-integration coefficients (value, rate, auxiliary)
            soln: Gauss-point solution
            shp: test/trial shape function data
            mate: current material bag (frozen)
            mate_old: previous converged material bag (frozen)
            local_k: caller-owned Jacobian block, required for JACOBIAN
            local_r: caller-owned residual block, required for RESIDUAL

        Returns:
            dict of projected scalars for PROJECTION, None otherwise

        Raises:
            ConfigurationError: unsupported calculation type, wrong sizes,
                missing material keys
        """
        ctan = check_ctan(ctan)
        n_dofs = self._check_sizes(elmt_info, soln)
        if not (mate.frozen and mate_old.frozen):
            self._config_error("material bags must be frozen before use")

        if calc_type is CalcType.RESIDUAL:
            buffer = self._buffer(local_r, n_dofs, elmt_info, LocalResidual, 'residual')
            self.compute_residual(elmt_info, soln, shp, mate, mate_old, buffer)
            return None
        if calc_type is CalcType.JACOBIAN:
            buffer = self._buffer(local_k, n_dofs, elmt_info, LocalJacobian, 'jacobian')
            self.compute_jacobian(elmt_info, ctan, soln, shp, mate, mate_old, buffer)
            return None
        if calc_type is CalcType.PROJECTION:
            gp_proj: Dict[str, float] = {}
            self.compute_projection(elmt_info, ctan, soln, shp, mate, mate_old, gp_proj)
            return gp_proj

        logger.error("unsupported calculation type %r in %s (element %s)",
                     calc_type, self.kind, elmt_info.elmt_id)
        raise ConfigurationError(
            f"unsupported calculation type {calc_type!r} in {self.kind}, "
            f"please check the calling code")

    def _config_error(self, message: str):
        logger.error("%s: %s", self.kind, message)
        raise ConfigurationError(f"{self.kind}: {message}")

    def _check_sizes(self, elmt_info: ElementInfo, soln: ElementSolution) -> int:
        n_active = self.n_dofs(elmt_info.n_dim)
        if soln.n_dofs not in (n_active, self.n_dofs(3)):
            self._config_error(
                f"solution has {soln.n_dofs} fields, expected {n_active} "
                f"for n_dim={elmt_info.n_dim}")
        soln.check_dimension(elmt_info.n_dim)
        return soln.n_dofs

    def _buffer(self, data, n_dofs, elmt_info, view_class, name):
        if data is None:
            self._config_error(f"no {name} buffer supplied")
        size = data.shape[0] if isinstance(data, np.ndarray) and data.ndim else None
        if size not in (self.n_dofs(elmt_info.n_dim), self.n_dofs(3)):
            self._config_error(
                f"{name} buffer sized {getattr(data, 'shape', None)} does not "
                f"match {self.n_dofs(elmt_info.n_dim)} local dofs")
        return view_class(data, size)

    @abstractmethod
    def compute_residual(self, elmt_info, soln, shp, mate, mate_old,
                         local_r: LocalResidual) -> None:
        """Write the residual entries of this physics block."""

    @abstractmethod
    def compute_jacobian(self, elmt_info, ctan, soln, shp, mate, mate_old,
                         local_k: LocalJacobian) -> None:
        """Write the Jacobian entries of this physics block."""

    @abstractmethod
    def compute_projection(self, elmt_info, ctan, soln, shp, mate, mate_old,
                           gp_proj: Dict[str, float]) -> None:
        """Fill named post-processing scalars."""


def check_pairing(element: ElementBase, material) -> None:
    """
    Verify at setup that the material provides every key the element reads.

    Raises:
        ConfigurationError: listing the missing keys per slot
    """
    missing = missing_keys(element.requires, material.provides)
    if missing:
        logger.error("%s cannot be paired with %s: missing %s",
                     element.kind, material.kind, missing)
        raise ConfigurationError(
            f"material '{material.kind}' does not provide {missing} "
            f"required by element '{element.kind}'")


def reaction_forces(stress, grad_test: np.ndarray, gp_proj: Dict[str, float]) -> None:
    """Reaction-force integrands σ_i· ∇N for i = x, y, z."""
    for i, name in enumerate(('reacforce_x', 'reacforce_y', 'reacforce_z'), start=1):
        gp_proj[name] = float(stress.ith_row(i) @ grad_test)
