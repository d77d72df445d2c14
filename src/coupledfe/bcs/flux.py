"""
Flux Boundary Conditions
========================

FluxBC implements the prescribed flux condition

    ∫ -∇u·n N dS = ∫ J N dS,     J = -∇u·n

ConvectiveFluxBC implements the solution-dependent flux J = h (u - u∞).
"""

from .base import BoundaryBase


class FluxBC(BoundaryBase):
    """
    Prescribed flux J (the boundary value) on each targeted dof.

    The flux does not depend on the solution, so no Jacobian entry is written.
    """

    kind = "flux"
    n_params = 0

    def compute_residual(self, i, dof, value, elmt_info, soln, normal, shp, local_r):
        local_r[i] = value * shp.test

    def compute_jacobian(self, i, dof, value, elmt_info, soln, normal, shp, ctan, local_k):
        pass


class ConvectiveFluxBC(BoundaryBase):
    """
    Convective flux J = h (u - u∞); the boundary value is u∞.

    Parameters: [h]
    """

    kind = "convective_flux"
    n_params = 1

    def _validate_params(self, params):
        if params[0] <= 0:
            self._config_error(f"transfer coefficient h must be positive, got {params[0]}")

    def compute_residual(self, i, dof, value, elmt_info, soln, normal, shp, local_r):
        h = self.params[0]
        local_r[i] = h * (soln.u(dof) - value) * shp.test

    def compute_jacobian(self, i, dof, value, elmt_info, soln, normal, shp, ctan, local_k):
        h = self.params[0]
        local_k[i, i] = h * shp.trial * shp.test * ctan[0]
