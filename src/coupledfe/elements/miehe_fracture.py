"""
Miehe Phase-Field Fracture Element
==================================

Residual and Jacobian for Miehe's phase-field fracture model:

    1) η ḋ = 2(1-d)H - (Gc/L) d + Gc L Δd
    2) div(σ) = 0

Dof layout: 1 = d, 2 = ux, 3 = uy, 4 = uz (3-D only).

Reference: Miehe, Hofacker, Welschinger (2010), Eq. 47,
doi:10.1016/j.cma.2010.04.011
"""

from .base import ElementBase, reaction_forces


class MieheFractureElement(ElementBase):
    """Damage + displacement element, paired with MieheFractureMaterial."""

    kind = "miehe_fracture"
    n_fields = 1
    requires = {
        'scalar': ('viscosity', 'Gc', 'L', 'H', 'psi'),
        'rank2': ('stress', 'dstressdD', 'dHdstrain'),
        'rank4': ('jacobian',),
    }

    def compute_residual(self, elmt_info, soln, shp, mate, mate_old, local_r):
        viscosity = mate.scalar('viscosity')
        Gc = mate.scalar('Gc')
        L = mate.scalar('L')
        hist = mate.scalar('H')
        stress = mate.rank_two('stress')
        d = soln.u(1)

        # R_d
        local_r[1] = (viscosity * soln.v(1) * shp.test
                      + 2 * (d - 1) * hist * shp.test
                      + (Gc / L) * d * shp.test
                      + Gc * L * (soln.grad_u(1) @ shp.grad_test))
        # R_u
        for i in range(1, elmt_info.n_dim + 1):
            local_r[i + 1] = stress.ith_row(i) @ shp.grad_test

    def compute_jacobian(self, elmt_info, ctan, soln, shp, mate, mate_old, local_k):
        viscosity = mate.scalar('viscosity')
        Gc = mate.scalar('Gc')
        L = mate.scalar('L')
        hist = mate.scalar('H')
        dstress_dd = mate.rank_two('dstressdD')
        dH = mate.rank_two('dHdstrain').array
        jac = mate.rank_four('jacobian')
        d = soln.u(1)
        n_dim = elmt_info.n_dim

        # K_d,d
        local_k[1, 1] = (viscosity * shp.trial * shp.test * ctan[1]
                         + 2 * shp.trial * hist * shp.test * ctan[0]
                         + (Gc / L) * shp.trial * shp.test * ctan[0]
                         + Gc * L * (shp.grad_trial @ shp.grad_test) * ctan[0])

        # dH/dε : sym(e_k ⊗ ∇N_trial)
        dH_grad = 0.5 * (dH + dH.T) @ shp.grad_trial

        for k in range(1, n_dim + 1):
            # K_d,uk
            local_k[1, k + 1] = 2 * (d - 1) * dH_grad[k - 1] * shp.test * ctan[0]
            # K_uk,d
            local_k[k + 1, 1] = (dstress_dd.ith_row(k) @ shp.grad_test) * shp.trial * ctan[0]
            # K_uk,ul
            for m in range(1, n_dim + 1):
                local_k[k + 1, m + 1] = jac.get_ik_jl_component(
                    k, m, shp.grad_test, shp.grad_trial) * ctan[0]

    def compute_projection(self, elmt_info, ctan, soln, shp, mate, mate_old, gp_proj):
        reaction_forces(mate.rank_two('stress'), shp.grad_test, gp_proj)
        gp_proj['H'] = mate.scalar('H')
        gp_proj['psi'] = mate.scalar('psi')
        gp_proj['damage'] = soln.u(1)
