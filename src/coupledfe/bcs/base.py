"""
Boundary Integrator Base
========================

Per-Gauss-point integrands of Neumann/flux type boundary conditions on a
facet. The facet quadrature loop belongs to the caller.

A condition targets a list of dofs (1-based field indices of the element).
The local blocks are sized to the number of targeted dofs: row i of the
block belongs to the i-th targeted dof, so a condition can never write into
fields it does not target.
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Sequence, Union

from ..core.buffers import LocalJacobian, LocalResidual
from ..core.calc_type import CalcType
from ..core.errors import ConfigurationError
from ..core.state import ElementInfo, ElementSolution, ShapeFunctionData, check_ctan

logger = logging.getLogger(__name__)

# tolerance on |n| - 1
NORMAL_TOL = 1e-8


class BoundaryBase(ABC):
    """
    Base class for boundary integrators.

    Args:
        dofs: targeted 1-based field indices
        value: boundary value, scalar (all dofs) or one value per dof
        params: positional parameters, ``n_params`` of them

    Raises:
        ConfigurationError: inconsistent value/parameter counts, invalid dofs
    """

    kind: str = "bc"
    n_params: int = 0

    def __init__(self, dofs: Sequence[int], value: Union[float, Sequence[float]],
                 params: Sequence[float] = ()):
        dofs = [int(i) for i in dofs]
        if not dofs:
            self._config_error("no dofs targeted")
        if any(i < 1 for i in dofs):
            self._config_error(f"dof indices are 1-based, got {dofs}")
        if len(set(dofs)) != len(dofs):
            self._config_error(f"duplicate dofs {dofs}")
        self.dofs = tuple(dofs)

        values = np.atleast_1d(np.asarray(value, dtype=np.float64)).ravel()
        if values.size == 1:
            values = np.full(len(dofs), values[0])
        elif values.size != len(dofs):
            self._config_error(
                f"{values.size} boundary values given for {len(dofs)} targeted dofs")
        values.flags.writeable = False
        self.values = values

        params = [float(p) for p in params]
        if len(params) != self.n_params:
            self._config_error(f"expects {self.n_params} parameters, got {len(params)}")
        self.params = tuple(params)
        self._validate_params(self.params)

    def _config_error(self, message: str):
        logger.error("%s: %s", self.kind, message)
        raise ConfigurationError(f"{self.kind}: {message}")

    def _validate_params(self, params):
        pass

    @property
    def n_dofs(self) -> int:
        return len(self.dofs)

    def compute_bc_value(self, calc_type: CalcType, elmt_info: ElementInfo,
                         soln: ElementSolution, normal: Sequence[float],
                         shp: ShapeFunctionData, ctan: Sequence[float],
                         local_k: np.ndarray = None, local_r: np.ndarray = None) -> None:
        """
        Dispatch on the calculation type.

        Args:
            calc_type: CalcType.RESIDUAL or CalcType.JACOBIAN
            elmt_info: facet information
            soln: Gauss-point solution of the owning element's fields
            normal: unit outward normal
            shp: test/trial shape function data on the facet
            ctan: time-integration coefficients
            local_k: caller-owned (n_dofs, n_dofs) block
            local_r: caller-owned (n_dofs,) block
        """
        ctan = check_ctan(ctan)
        normal = self._check_normal(normal)
        if max(self.dofs) > soln.n_dofs:
            self._config_error(f"targets dof {max(self.dofs)} but the element has {soln.n_dofs}")

        if calc_type is CalcType.RESIDUAL:
            if local_r is None:
                self._config_error("no residual buffer supplied")
            view = LocalResidual(local_r, self.n_dofs)
            for i, (dof, value) in enumerate(zip(self.dofs, self.values), start=1):
                self.compute_residual(i, dof, value, elmt_info, soln, normal, shp, view)
        elif calc_type is CalcType.JACOBIAN:
            if local_k is None:
                self._config_error("no jacobian buffer supplied")
            view = LocalJacobian(local_k, self.n_dofs)
            for i, (dof, value) in enumerate(zip(self.dofs, self.values), start=1):
                self.compute_jacobian(i, dof, value, elmt_info, soln, normal, shp, ctan, view)
        else:
            logger.error("unsupported calculation type %r in %s", calc_type, self.kind)
            raise ConfigurationError(
                f"unsupported calculation type {calc_type!r} in {self.kind}, "
                f"please check the calling code")

    def _check_normal(self, normal) -> np.ndarray:
        n = np.zeros(3)
        arr = np.asarray(normal, dtype=np.float64).ravel()
        if arr.size > 3:
            self._config_error(f"normal has {arr.size} components")
        n[:arr.size] = arr
        if abs(np.linalg.norm(n) - 1.0) > NORMAL_TOL:
            self._config_error(f"normal must be a unit vector, |n| = {np.linalg.norm(n)}")
        return n

    @abstractmethod
    def compute_residual(self, i: int, dof: int, value: float, elmt_info, soln,
                         normal, shp, local_r: LocalResidual) -> None:
        """Write residual row i (the i-th targeted dof)."""

    @abstractmethod
    def compute_jacobian(self, i: int, dof: int, value: float, elmt_info, soln,
                         normal, shp, ctan, local_k: LocalJacobian) -> None:
        """Write Jacobian row i (the i-th targeted dof)."""
