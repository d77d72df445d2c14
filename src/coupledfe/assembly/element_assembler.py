"""
Element Assembler
=================

Reference single-element driver: loops Gauss points and (test, trial) node
pairs, refreshes the material bag, calls the element kernel and scatters the
per-pair blocks into the element residual and Jacobian.

Nodal projections are lumped-mass averages of the Gauss-point values,
q_I = Σ q N_I JxW / Σ N_I JxW. Reaction forces are integrated as they are,
so they match the residual rows of the displacement fields.

DOF ordering: node-major, dof index = node * n_dofs + (field - 1).
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..core.calc_type import CalcType
from ..core.errors import raise_logged
from ..core.material_bag import MaterialBag
from ..core.state import ElementInfo, ElementSolution, ShapeFunctionData, check_ctan
from ..elements.base import ElementBase, check_pairing
from ..materials.base import MaterialBase
from ..bcs.base import BoundaryBase
from .quadrature import simplex_rule, line_rule
from .shape_functions import LinearSimplex, LineFacet

logger = logging.getLogger(__name__)

REACTION_KEYS = ('reacforce_x', 'reacforce_y', 'reacforce_z')


@dataclass
class AssemblerConfig:
    """Configuration for the reference driver and Jacobian verification."""
    fd_step: float = 1e-7        # Relative finite-difference step
    rtol: float = 1e-6           # Relative tolerance of the Jacobian check
    facet_points: int = 2        # Gauss points per boundary facet


@dataclass
class ElementResult:
    """Element-level output of one evaluation."""
    residual: np.ndarray
    jacobian: np.ndarray
    bags: List[MaterialBag]
    projection: List[Dict[str, float]] = field(default_factory=list)


class ElementAssembler:
    """
    Evaluate one element through an element kernel and its paired material.

    Key pairing and material parameters are validated here, once, before any
    Gauss-point loop.

    Attributes:
        element: ElementBase instance
        material: MaterialBase instance
        params: validated material parameters
        n_dim: spatial dimension
        n_dofs: dofs per node
        config: AssemblerConfig instance
    """

    def __init__(self, element: ElementBase, material: MaterialBase,
                 params: Sequence[float], n_dim: int,
                 config: Optional[AssemblerConfig] = None):
        check_pairing(element, material)
        if n_dim not in (1, 2, 3):
            raise_logged(logger, f"n_dim must be 1, 2 or 3, got {n_dim}")
        self.element = element
        self.material = material
        self.params = material.setup(params)
        self.n_dim = n_dim
        self.n_dofs = element.n_dofs(n_dim)
        self.config = config or AssemblerConfig()

    def _geometry(self, nodes) -> LinearSimplex:
        basis = LinearSimplex(nodes)
        if basis.n_dim != self.n_dim:
            raise_logged(
                logger,
                f"element nodes are {basis.n_dim}-D, assembler is {self.n_dim}-D")
        return basis

    def _check_nodal(self, u, basis, name) -> np.ndarray:
        u = np.asarray(u, dtype=np.float64)
        if u.size != basis.n_nodes * self.n_dofs:
            raise_logged(
                logger,
                f"{name} has {u.size} entries, expected {basis.n_nodes} x {self.n_dofs}")
        return u.reshape(basis.n_nodes, self.n_dofs)

    def _solution(self, basis, N, u, u_old, ctan) -> ElementSolution:
        v = ctan[1] * (u - u_old)
        return ElementSolution(
            gp_u=N @ u,
            gp_v=N @ v,
            gp_grad_u=(basis.grads.T @ u).T,
            gp_u_old=N @ u_old,
            gp_grad_u_old=(basis.grads.T @ u_old).T,
        )

    def initialize(self, nodes: np.ndarray, u: Optional[np.ndarray] = None) -> List[MaterialBag]:
        """Initial material bags, one per Gauss point."""
        basis = self._geometry(nodes)
        u = np.zeros((basis.n_nodes, self.n_dofs)) if u is None else self._check_nodal(u, basis, 'u')
        points, _ = simplex_rule(self.n_dim)
        bags = []
        for gp, xi in enumerate(points):
            N = basis.values(xi)
            info = ElementInfo(n_dim=self.n_dim, n_nodes=basis.n_nodes, gp_id=gp,
                               gp_coords=basis.physical_point(xi), volume=basis.measure)
            soln = self._solution(basis, N, u, u, (1.0, 0.0, 0.0))
            bags.append(self.material.init_material_properties(self.params, info, soln))
        return bags

    def evaluate(self, nodes: np.ndarray, u: np.ndarray, u_old: Optional[np.ndarray] = None,
                 ctan: Sequence[float] = (1.0, 0.0, 0.0), dt: float = 1.0, t: float = 0.0,
                 old_bags: Optional[List[MaterialBag]] = None, elmt_id: int = 0) -> ElementResult:
        """
        Element residual, Jacobian, material bags and nodal projections.

        Args:
            nodes: shape (n_nodes, n_dim), node coordinates
            u: nodal solution, shape (n_nodes, n_dofs) or flat
            u_old: previous converged nodal solution (defaults to u)
            ctan: time-integration coefficients, v = ctan[1] (u - u_old)
            dt: time step
            t: current time
            old_bags: previous converged bags (defaults to initialize())
            elmt_id: element index for diagnostics

        Returns:
            ElementResult
        """
        ctan = check_ctan(ctan)
        basis = self._geometry(nodes)
        u = self._check_nodal(u, basis, 'u')
        u_old = u if u_old is None else self._check_nodal(u_old, basis, 'u_old')
        if old_bags is None:
            old_bags = self.initialize(nodes, u_old)

        points, weights = simplex_rule(self.n_dim)
        if len(old_bags) != len(points):
            raise_logged(
                logger,
                f"{len(old_bags)} old material bags for {len(points)} Gauss points")

        nd = self.n_dofs
        n_total = basis.n_nodes * nd
        R = np.zeros(n_total)
        K = np.zeros((n_total, n_total))
        projection = [dict() for _ in range(basis.n_nodes)]
        mass = np.zeros(basis.n_nodes)
        bags = []

        for gp, (xi, w) in enumerate(zip(points, weights)):
            N = basis.values(xi)
            JxW = w * abs(np.linalg.det(basis.jacobian))
            info = ElementInfo(n_dim=self.n_dim, n_nodes=basis.n_nodes, dt=dt, t=t,
                               elmt_id=elmt_id, gp_id=gp,
                               gp_coords=basis.physical_point(xi), volume=basis.measure)
            soln = self._solution(basis, N, u, u_old, ctan)
            mate_old = old_bags[gp]
            mate = self.material.compute_material_properties(self.params, info, soln, mate_old)
            bags.append(mate)

            for I in range(basis.n_nodes):
                rows = slice(I * nd, (I + 1) * nd)
                shp = ShapeFunctionData(test=N[I], grad_test=basis.grads[I])
                local_r = np.zeros(nd)
                self.element.compute_all(CalcType.RESIDUAL, info, ctan, soln, shp,
                                         mate, mate_old, local_r=local_r)
                R[rows] += local_r * JxW

                gp_proj = self.element.compute_all(CalcType.PROJECTION, info, ctan, soln, shp,
                                                   mate, mate_old)
                mass[I] += N[I] * JxW
                for key, value in gp_proj.items():
                    weight = JxW if key in REACTION_KEYS else N[I] * JxW
                    projection[I][key] = projection[I].get(key, 0.0) + value * weight

                for J in range(basis.n_nodes):
                    cols = slice(J * nd, (J + 1) * nd)
                    shp = ShapeFunctionData(test=N[I], grad_test=basis.grads[I],
                                            trial=N[J], grad_trial=basis.grads[J])
                    local_k = np.zeros((nd, nd))
                    self.element.compute_all(CalcType.JACOBIAN, info, ctan, soln, shp,
                                             mate, mate_old, local_k=local_k)
                    K[rows, cols] += local_k * JxW

        for I, node_proj in enumerate(projection):
            for key in node_proj:
                if key not in REACTION_KEYS:
                    node_proj[key] /= mass[I]

        logger.debug("%s element %d: |R| = %.3e, |K| = %.3e",
                     self.element.kind, elmt_id, np.linalg.norm(R), np.linalg.norm(K))
        return ElementResult(residual=R, jacobian=K, bags=bags, projection=projection)


class FacetAssembler:
    """
    Integrate a boundary condition over a 2-D line facet.

    Args:
        bc: BoundaryBase instance
        n_fields: number of element fields interpolated on the facet
        config: AssemblerConfig (facet_points)
    """

    def __init__(self, bc: BoundaryBase, n_fields: int,
                 config: Optional[AssemblerConfig] = None):
        if max(bc.dofs) > n_fields:
            raise_logged(
                logger,
                f"{bc.kind} targets dof {max(bc.dofs)} but the element has {n_fields} fields")
        self.bc = bc
        self.n_fields = n_fields
        self.config = config or AssemblerConfig()

    def evaluate(self, facet_nodes: np.ndarray, u: np.ndarray,
                 normal: Optional[np.ndarray] = None,
                 ctan: Sequence[float] = (1.0, 0.0, 0.0)):
        """
        Facet residual and Jacobian for the targeted dofs.

        Args:
            facet_nodes: shape (2, 2)
            u: nodal solution of all element fields on the facet, shape (2, n_fields)
            normal: outward normal, defaults to the facet's own normal
            ctan: time-integration coefficients

        Returns:
            (R, K) with node-major ordering over the targeted dofs,
            shapes (2 * n_bc,) and (2 * n_bc, 2 * n_bc)
        """
        facet = LineFacet(facet_nodes)
        u = np.asarray(u, dtype=np.float64).reshape(facet.n_nodes, self.n_fields)
        normal = facet.normal if normal is None else normal
        nb = self.bc.n_dofs
        R = np.zeros(facet.n_nodes * nb)
        K = np.zeros((facet.n_nodes * nb, facet.n_nodes * nb))

        points, weights = line_rule(self.config.facet_points)
        for gp, (xi, w) in enumerate(zip(points, weights)):
            N = facet.values(xi)
            JxW = w * 0.5 * facet.length
            info = ElementInfo(n_dim=2, n_nodes=facet.n_nodes, gp_id=gp,
                               gp_coords=facet.physical_point(xi), volume=facet.length)
            soln = ElementSolution(gp_u=N @ u, gp_v=np.zeros(self.n_fields),
                                   gp_grad_u=np.zeros((self.n_fields, 3)))
            for I in range(facet.n_nodes):
                rows = slice(I * nb, (I + 1) * nb)
                shp = ShapeFunctionData(test=N[I], grad_test=np.zeros(3))
                local_r = np.zeros(nb)
                self.bc.compute_bc_value(CalcType.RESIDUAL, info, soln, normal, shp, ctan,
                                         local_r=local_r)
                R[rows] += local_r * JxW
                for J in range(facet.n_nodes):
                    cols = slice(J * nb, (J + 1) * nb)
                    shp = ShapeFunctionData(test=N[I], grad_test=np.zeros(3),
                                            trial=N[J], grad_trial=np.zeros(3))
                    local_k = np.zeros((nb, nb))
                    self.bc.compute_bc_value(CalcType.JACOBIAN, info, soln, normal, shp, ctan,
                                             local_k=local_k)
                    K[rows, cols] += local_k * JxW
        return R, K
