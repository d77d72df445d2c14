"""
Elastic Cahn-Hilliard Material
==============================

Linear elasticity coupled to a diffusing species through a volumetric
eigenstrain, for the mechanics + Cahn-Hilliard element.

Field layout: index 1 is the concentration c, index 2 the chemical potential
μ, indices 3..n_dim+2 the displacements.

Chemical free energy (regular solution):

    f(c)   = c ln c + (1-c) ln(1-c) + χ c(1-c)
    f'(c)  = ln(c/(1-c)) + χ(1-2c)
    f''(c) = 1/(c(1-c)) - 2χ

Eigenstrain ε* = ω c I. The local chemical potential is

    μ_loc = f'(c) + ∂ψ_el/∂c = f'(c) - ω tr(σ)

(σ is the second Piola-Kirchhoff stress S in the finite-strain variant).
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from ..core.errors import ConfigurationError
from ..tensors import RankTwoTensor, RankFourTensor
from .base import MaterialBase, ElasticParams, displacement_gradient


@dataclass(frozen=True)
class CahnHilliardParams(ElasticParams):
    """
    Attributes:
        M: mobility
        kappa: gradient energy coefficient
        chi: interaction parameter of the regular solution
        omega: eigenstrain per unit concentration
        finite: 0 small strain, 1 St. Venant-Kirchhoff finite strain
    """
    M: float = 1.0
    kappa: float = 0.0
    chi: float = 0.0
    omega: float = 0.0
    finite: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.M <= 0:
            raise ConfigurationError(f"mobility M must be positive, got {self.M}")
        if self.kappa < 0:
            raise ConfigurationError(f"kappa must be non-negative, got {self.kappa}")
        if self.finite not in (0, 1):
            raise ConfigurationError(f"finite strain flag must be 0 or 1, got {self.finite}")


def free_energy(c: float, chi: float) -> Tuple[float, float, float]:
    """
    Regular-solution free energy and its first two derivatives.

    Args:
        c: concentration, must lie strictly inside (0, 1)
        chi: interaction parameter

    Returns:
        (f, df/dc, d²f/dc²)

    Raises:
        ValueError: c outside (0, 1), where the logarithms are undefined
    """
    if not 0.0 < c < 1.0:
        raise ValueError(f"concentration {c} outside (0, 1)")
    f = c * np.log(c) + (1 - c) * np.log(1 - c) + chi * c * (1 - c)
    df = np.log(c / (1 - c)) + chi * (1 - 2 * c)
    d2f = 1.0 / (c * (1 - c)) - 2 * chi
    return float(f), float(df), float(d2f)


class ElasticCahnHilliardMaterial(MaterialBase):
    """
    Mechanically coupled Cahn-Hilliard material.

    Parameters: [E, nu, M, kappa, chi, omega, finite=0]
    """

    kind = "elastic_cahn_hilliard"
    param_class = CahnHilliardParams
    provides = {
        'scalar': ('M', 'kappa', 'mu', 'dmudc', 'f'),
        'rank2': ('strain', 'stress', 'dstressdc', 'dmudstrain'),
        'rank4': ('jacobian',),
    }

    def setup(self, params):
        if len(params) < 6:
            self._config_error(
                "expects at least 6 parameters "
                f"[E, nu, M, kappa, chi, omega], got {len(params)}")
        return super().setup(params)

    def _init(self, params, elmt_info, soln, bag):
        bag.set_scalar('M', params.M)
        bag.set_scalar('kappa', params.kappa)
        bag.set_rank4('jacobian', params.elasticity_tensor())

    def _compute(self, params, elmt_info, soln, mate_old, bag):
        bag.set_scalar('M', params.M)
        bag.set_scalar('kappa', params.kappa)

        c = soln.u(1)
        try:
            f, df, d2f = free_energy(c, params.chi)
        except ValueError as exc:
            self._fail(str(exc), 'free_energy', elmt_info)

        C = params.elasticity_tensor()
        I = RankTwoTensor.identity()
        B = C.double_dot(I)  # C : I
        omega = params.omega
        grad_u = displacement_gradient(soln, 3, elmt_info.n_dim)

        if params.finite:
            F = I + grad_u
            if F.det() <= 0:
                self._fail(f"non-positive deformation gradient determinant {F.det()}",
                           'deformation_gradient', elmt_info)
            green = 0.5 * (F.transpose() @ F - I)
            strain = green - omega * c * I
            S = C.double_dot(strain)
            stress = F @ S
            Fa, Sa = F.array, S.array
            jacobian = RankFourTensor(
                np.einsum('ik,lj->ijkl', np.eye(3), Sa)
                + np.einsum('im,kn,mjnl->ijkl', Fa, Fa, C.array))
            dstressdc = -omega * (F @ B)
            dmudstrain = -omega * (F @ B)
            tr_stress = S.trace()
        else:
            strain = grad_u.sym() - omega * c * I
            stress = C.double_dot(strain)
            jacobian = C
            dstressdc = -omega * B
            dmudstrain = -omega * B
            tr_stress = stress.trace()

        bag.set_scalar('f', f)
        bag.set_scalar('mu', df - omega * tr_stress)
        bag.set_scalar('dmudc', d2f + omega ** 2 * B.trace())
        bag.set_rank2('strain', strain)
        bag.set_rank2('stress', stress)
        bag.set_rank2('dstressdc', dstressdc)
        bag.set_rank2('dmudstrain', dmudstrain)
        bag.set_rank4('jacobian', jacobian)
