"""
Mechanics + Cahn-Hilliard Element
=================================

Mixed (c, μ) form of the Cahn-Hilliard equation coupled to quasi-static
mechanics through the material's eigenstrain:

    ċ = div(M ∇μ)
    μ = μ_loc(c, ∇u) - κ Δc
    div(σ) = 0

Weak residuals per test function N:

    R_c  = ċ N + M ∇μ·∇N
    R_μ  = μ N - μ_loc N - κ ∇c·∇N
    R_ui = σ_i· ∇N

Dof layout: 1 = c, 2 = μ, 3 = ux, 4 = uy, 5 = uz (3-D only).
"""

from .base import ElementBase, reaction_forces


class MechanicsCahnHilliardElement(ElementBase):
    """Concentration, chemical potential and displacement element."""

    kind = "mechanics_cahn_hilliard"
    n_fields = 2
    requires = {
        'scalar': ('M', 'kappa', 'mu', 'dmudc', 'f'),
        'rank2': ('stress', 'dstressdc', 'dmudstrain'),
        'rank4': ('jacobian',),
    }

    def compute_residual(self, elmt_info, soln, shp, mate, mate_old, local_r):
        M = mate.scalar('M')
        kappa = mate.scalar('kappa')
        mu_loc = mate.scalar('mu')
        stress = mate.rank_two('stress')

        local_r[1] = soln.v(1) * shp.test + M * (soln.grad_u(2) @ shp.grad_test)
        local_r[2] = (soln.u(2) * shp.test
                      - mu_loc * shp.test
                      - kappa * (soln.grad_u(1) @ shp.grad_test))
        for i in range(1, elmt_info.n_dim + 1):
            local_r[i + 2] = stress.ith_row(i) @ shp.grad_test

    def compute_jacobian(self, elmt_info, ctan, soln, shp, mate, mate_old, local_k):
        M = mate.scalar('M')
        kappa = mate.scalar('kappa')
        dmudc = mate.scalar('dmudc')
        dstress_dc = mate.rank_two('dstressdc')
        dmu_dstrain = mate.rank_two('dmudstrain')
        jac = mate.rank_four('jacobian')
        n_dim = elmt_info.n_dim
        grad_dot = shp.grad_trial @ shp.grad_test

        # K_c,c and K_c,mu
        local_k[1, 1] = shp.trial * shp.test * ctan[1]
        local_k[1, 2] = M * grad_dot * ctan[0]
        # K_mu,mu and K_mu,c
        local_k[2, 2] = shp.trial * shp.test * ctan[0]
        local_k[2, 1] = (-dmudc * shp.trial * shp.test - kappa * grad_dot) * ctan[0]

        for k in range(1, n_dim + 1):
            # K_mu,uk
            local_k[2, k + 2] = -(dmu_dstrain.ith_row(k) @ shp.grad_trial) * shp.test * ctan[0]
            # K_uk,c
            local_k[k + 2, 1] = (dstress_dc.ith_row(k) @ shp.grad_test) * shp.trial * ctan[0]
            # K_uk,ul
            for m in range(1, n_dim + 1):
                local_k[k + 2, m + 2] = jac.get_ik_jl_component(
                    k, m, shp.grad_test, shp.grad_trial) * ctan[0]

    def compute_projection(self, elmt_info, ctan, soln, shp, mate, mate_old, gp_proj):
        reaction_forces(mate.rank_two('stress'), shp.grad_test, gp_proj)
        gp_proj['mu_local'] = mate.scalar('mu')
        gp_proj['f'] = mate.scalar('f')
        gp_proj['concentration'] = soln.u(1)
