"""
Linear Elastic Material
=======================

Small-strain isotropic elasticity for the pure mechanics element.
Displacement fields start at index 1.
"""

from .base import MaterialBase, ElasticParams, displacement_gradient


class LinearElasticMaterial(MaterialBase):
    """
    Hooke's law, σ = C : ε with ε = sym(∇u).

    Parameters: [E, nu]
    """

    kind = "linear_elastic"
    param_class = ElasticParams
    provides = {
        'scalar': ('psi', 'vonMises'),
        'rank2': ('strain', 'stress'),
        'rank4': ('jacobian',),
    }

    def _init(self, params, elmt_info, soln, bag):
        bag.set_rank4('jacobian', params.elasticity_tensor())

    def _compute(self, params, elmt_info, soln, mate_old, bag):
        C = params.elasticity_tensor()
        strain = displacement_gradient(soln, 1, elmt_info.n_dim).sym()
        stress = C.double_dot(strain)

        bag.set_rank2('strain', strain)
        bag.set_rank2('stress', stress)
        bag.set_rank4('jacobian', C)
        bag.set_scalar('psi', 0.5 * stress.double_dot(strain))
        bag.set_scalar('vonMises', stress.von_mises())
