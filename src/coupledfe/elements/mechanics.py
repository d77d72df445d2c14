"""
Mechanics Element
=================

Quasi-static equilibrium div(σ) = 0.

Dof layout: 1 = ux, 2 = uy, 3 = uz (3-D only).
"""

from .base import ElementBase, reaction_forces


class MechanicsElement(ElementBase):
    """Pure mechanics element, paired with a material providing stress and jacobian."""

    kind = "mechanics"
    n_fields = 0
    requires = {
        'rank2': ('stress',),
        'rank4': ('jacobian',),
    }

    def compute_residual(self, elmt_info, soln, shp, mate, mate_old, local_r):
        stress = mate.rank_two('stress')
        for i in range(1, elmt_info.n_dim + 1):
            local_r[i] = stress.ith_row(i) @ shp.grad_test

    def compute_jacobian(self, elmt_info, ctan, soln, shp, mate, mate_old, local_k):
        jac = mate.rank_four('jacobian')
        for i in range(1, elmt_info.n_dim + 1):
            for k in range(1, elmt_info.n_dim + 1):
                local_k[i, k] = jac.get_ik_jl_component(i, k, shp.grad_test, shp.grad_trial) * ctan[0]

    def compute_projection(self, elmt_info, ctan, soln, shp, mate, mate_old, gp_proj):
        stress = mate.rank_two('stress')
        reaction_forces(stress, shp.grad_test, gp_proj)
        gp_proj['stress_xx'] = stress(1, 1)
        gp_proj['stress_yy'] = stress(2, 2)
        gp_proj['stress_zz'] = stress(3, 3)
        gp_proj['stress_xy'] = stress(1, 2)
        gp_proj['vonMises'] = stress.von_mises()
