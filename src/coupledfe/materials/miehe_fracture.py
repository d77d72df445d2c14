"""
Miehe Phase-Field Fracture Material
===================================

Constitutive response for the damage + mechanics element.

Field layout: index 1 is the damage d, indices 2..n_dim+1 the displacements.

    g(d) = (1 - d)² + k
    σ    = g(d) σ⁺ + σ⁻
    H    = max(H_old, ψ⁺)          (irreversibility)

Reference: Miehe, Hofacker, Welschinger (2010), doi:10.1016/j.cma.2010.04.011
"""

from dataclasses import dataclass

from ..core.errors import ConfigurationError
from ..tensors import RankTwoTensor
from .base import MaterialBase, ElasticParams, displacement_gradient
from .tension_split import SPLITS


@dataclass(frozen=True)
class FractureParams(ElasticParams):
    """
    Attributes:
        Gc: critical energy release rate
        L: phase-field length scale
        viscosity: viscous regularization η (0 for rate-independent)
        split: 0 none, 1 spectral, 2 volumetric-deviatoric
        k: residual stiffness added to the degradation function
    """
    Gc: float = 0.0
    L: float = 0.0
    viscosity: float = 0.0
    split: int = 1
    k: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        if self.Gc <= 0:
            raise ConfigurationError(f"Gc must be positive, got {self.Gc}")
        if self.L <= 0:
            raise ConfigurationError(f"L must be positive, got {self.L}")
        if self.viscosity < 0:
            raise ConfigurationError(f"viscosity must be non-negative, got {self.viscosity}")
        if self.split not in SPLITS:
            raise ConfigurationError(f"Unknown split flag: {self.split}")
        if not 0 <= self.k < 1:
            raise ConfigurationError(f"residual stiffness k must be in [0, 1), got {self.k}")


class MieheFractureMaterial(MaterialBase):
    """
    Phase-field fracture material with a tension-compression split.

    Parameters: [E, nu, Gc, L, viscosity, split=1, k=0]
    """

    kind = "miehe_fracture"
    param_class = FractureParams
    provides = {
        'scalar': ('viscosity', 'Gc', 'L', 'H', 'psi', 'psi_pos', 'psi_neg'),
        'rank2': ('strain', 'stress', 'dstressdD', 'dHdstrain'),
        'rank4': ('jacobian',),
    }

    def setup(self, params):
        # Gc, L and viscosity are mandatory for this material
        if len(params) < 5:
            self._config_error(
                f"expects at least 5 parameters [E, nu, Gc, L, viscosity], "
                f"got {len(params)}")
        return super().setup(params)

    def _set_constants(self, params, bag):
        bag.set_scalar('viscosity', params.viscosity)
        bag.set_scalar('Gc', params.Gc)
        bag.set_scalar('L', params.L)

    def _init(self, params, elmt_info, soln, bag):
        self._set_constants(params, bag)
        bag.set_scalar('H', 0.0)
        bag.set_rank4('jacobian', params.elasticity_tensor())

    def _compute(self, params, elmt_info, soln, mate_old, bag):
        self._set_constants(params, bag)

        d = soln.u(1)
        strain = displacement_gradient(soln, 2, elmt_info.n_dim).sym()
        split = SPLITS[params.split](strain, params.lame_lambda, params.lame_mu)

        g = (1.0 - d) ** 2 + params.k
        dg = 2.0 * (d - 1.0)

        bag.set_rank2('strain', strain)
        bag.set_rank2('stress', g * split.stress_pos + split.stress_neg)
        bag.set_rank4('jacobian', g * split.jacobian_pos + split.jacobian_neg)
        bag.set_rank2('dstressdD', dg * split.stress_pos)

        bag.set_scalar('psi_pos', split.psi_pos)
        bag.set_scalar('psi_neg', split.psi_neg)
        bag.set_scalar('psi', g * split.psi_pos + split.psi_neg)

        H_old = mate_old.scalar('H')
        if split.psi_pos > H_old:
            bag.set_scalar('H', split.psi_pos)
            bag.set_rank2('dHdstrain', split.stress_pos)
        else:
            bag.set_scalar('H', H_old)
            bag.set_rank2('dHdstrain', RankTwoTensor.zeros())
