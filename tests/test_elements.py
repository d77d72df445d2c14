"""
Tests for Elements Module
=========================
"""

import logging
import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from coupledfe.core import (
    CalcType, ElementInfo, ElementSolution, ShapeFunctionData,
    MaterialBag, ConfigurationError,
)
from coupledfe.materials import (
    LinearElasticMaterial, MieheFractureMaterial, ElasticCahnHilliardMaterial,
)
from coupledfe.elements import (
    MechanicsElement, MieheFractureElement, MechanicsCahnHilliardElement,
    check_pairing, create_element, ElementKind,
)
from coupledfe.assembly import ElementAssembler

SENTINEL = 99.0


def gauss_point(material, params, u, grads, n_dim=2, v=None):
    """Element info, solution and current/old bags at one Gauss point."""
    u = np.asarray(u, dtype=float)
    grad_u = np.zeros((u.size, 3))
    grads = np.asarray(grads, dtype=float)
    grad_u[:, :grads.shape[1]] = grads
    v = np.zeros(u.size) if v is None else np.asarray(v, dtype=float)
    info = ElementInfo(n_dim=n_dim, dt=0.1)
    soln = ElementSolution(gp_u=u, gp_v=v, gp_grad_u=grad_u)
    mate_old = material.init_material_properties(params, info, soln)
    mate = material.compute_material_properties(params, info, soln, mate_old)
    return info, soln, mate, mate_old


@pytest.fixture
def shp():
    return ShapeFunctionData(test=0.4, grad_test=[1.2, -0.7],
                             trial=0.3, grad_trial=[-0.5, 0.9])


@pytest.fixture
def miehe_point():
    material = MieheFractureMaterial()
    params = material.setup([1.0, 0.3, 1e-2, 0.2, 1e-2])
    grads = [[0.3, -0.1], [0.05, 0.01], [0.0, -0.01]]
    return gauss_point(material, params, [0.2, 0.01, 0.02], grads, v=[0.5, 0.0, 0.0])


@pytest.fixture
def ch_point():
    material = ElasticCahnHilliardMaterial()
    params = material.setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05])
    grads = [[0.2, 0.1], [0.5, -0.3], [0.02, 0.01], [0.0, -0.01]]
    return gauss_point(material, params, [0.4, 0.1, 0.0, 0.0], grads, v=[0.3, 0.0, 0.0, 0.0])


class TestDispatch:
    """Tests for compute_all."""

    def test_unknown_calc_type(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        with pytest.raises(ConfigurationError, match='miehe_fracture'):
            MieheFractureElement().compute_all('stiffness', info, (1, 0, 0), soln, shp,
                                               mate, mate_old, local_r=np.zeros(3))

    def test_missing_buffer(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        element = MieheFractureElement()
        with pytest.raises(ConfigurationError):
            element.compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp, mate, mate_old)
        with pytest.raises(ConfigurationError):
            element.compute_all(CalcType.JACOBIAN, info, (1, 0, 0), soln, shp, mate, mate_old,
                                local_r=np.zeros(3))

    def test_wrong_buffer_size(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        with pytest.raises(ConfigurationError):
            MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp,
                                               mate, mate_old, local_r=np.zeros(6))

    def test_wrong_solution_size(self, miehe_point, shp):
        info, _, mate, mate_old = miehe_point
        soln = ElementSolution(gp_u=np.zeros(2), gp_v=np.zeros(2), gp_grad_u=np.zeros((2, 3)))
        with pytest.raises(ConfigurationError):
            MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp,
                                               mate, mate_old, local_r=np.zeros(3))

    def test_unfrozen_bag_rejected(self, miehe_point, shp):
        info, soln, mate, _ = miehe_point
        with pytest.raises(ConfigurationError):
            MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp,
                                               mate, MaterialBag(), local_r=np.zeros(3))

    def test_rejection_is_logged(self, miehe_point, shp, caplog):
        info, soln, mate, _ = miehe_point
        with caplog.at_level(logging.ERROR, logger='coupledfe'):
            with pytest.raises(ConfigurationError, match='frozen'):
                MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp,
                                                   mate, MaterialBag(), local_r=np.zeros(3))
            with pytest.raises(ConfigurationError):
                MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp,
                                                   mate, mate, local_r=np.zeros(6))
        messages = [rec.getMessage() for rec in caplog.records if rec.levelno == logging.ERROR]
        assert len(messages) == 2
        assert all(msg.startswith('miehe_fracture: ') for msg in messages)

    def test_bad_ctan(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        with pytest.raises(ConfigurationError):
            MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 0), soln, shp,
                                               mate, mate_old, local_r=np.zeros(3))

    def test_projection_returns_dict(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        proj = MieheFractureElement().compute_all(CalcType.PROJECTION, info, (1, 0, 0), soln,
                                                  shp, mate, mate_old)
        assert proj['damage'] == 0.2
        assert proj['H'] == mate.scalar('H')
        stress = mate.rank_two('stress')
        assert np.isclose(proj['reacforce_x'], stress.ith_row(1) @ shp.grad_test)


class TestMieheFractureElement:
    """Tests for MieheFractureElement."""

    def test_damage_residual(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        r = np.zeros(3)
        MieheFractureElement().compute_all(CalcType.RESIDUAL, info, (1, 10, 0), soln, shp,
                                           mate, mate_old, local_r=r)
        Gc, L, eta = 1e-2, 0.2, 1e-2
        d, H = 0.2, mate.scalar('H')
        expected = (eta * 0.5 * 0.4 + 2 * (d - 1) * H * 0.4 + Gc / L * d * 0.4
                    + Gc * L * (0.3 * 1.2 + 0.1 * 0.7))
        assert np.isclose(r[0], expected)
        assert np.isclose(r[1], mate.rank_two('stress').ith_row(1) @ shp.grad_test)

    def test_two_dimensional_guard(self, miehe_point, shp):
        """A 2-D kernel leaves the third displacement row/column untouched."""
        info, soln, mate, mate_old = miehe_point
        element = MieheFractureElement()
        r = np.full(4, SENTINEL)
        k = np.full((4, 4), SENTINEL)
        element.compute_all(CalcType.RESIDUAL, info, (1, 10, 0), soln, shp, mate, mate_old,
                            local_r=r)
        element.compute_all(CalcType.JACOBIAN, info, (1, 10, 0), soln, shp, mate, mate_old,
                            local_k=k)
        assert r[3] == SENTINEL
        assert np.all(k[3, :] == SENTINEL)
        assert np.all(k[:, 3] == SENTINEL)
        assert np.all(r[:3] != SENTINEL)
        assert np.all(k[:3, :3] != SENTINEL)

    def test_zero_ctan_zeroes_jacobian(self, miehe_point, shp):
        info, soln, mate, mate_old = miehe_point
        k = np.full((3, 3), SENTINEL)
        MieheFractureElement().compute_all(CalcType.JACOBIAN, info, (0, 0, 0), soln, shp,
                                           mate, mate_old, local_k=k)
        assert np.allclose(k, 0.0)


class TestMechanicsCahnHilliardElement:
    """Tests for MechanicsCahnHilliardElement."""

    def test_residual(self, ch_point, shp):
        info, soln, mate, mate_old = ch_point
        r = np.zeros(4)
        MechanicsCahnHilliardElement().compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln,
                                                   shp, mate, mate_old, local_r=r)
        M, kappa = 1.0, 1e-2
        grad_test = np.array([1.2, -0.7])
        assert np.isclose(r[0], 0.3 * 0.4 + M * np.array([0.5, -0.3]) @ grad_test)
        assert np.isclose(r[1], 0.1 * 0.4 - mate.scalar('mu') * 0.4
                          - kappa * np.array([0.2, 0.1]) @ grad_test)
        assert np.isclose(r[3], mate.rank_two('stress').ith_row(2) @ shp.grad_test)

    def test_two_dimensional_guard(self, ch_point, shp):
        info, soln, mate, mate_old = ch_point
        element = MechanicsCahnHilliardElement()
        r = np.full(5, SENTINEL)
        k = np.full((5, 5), SENTINEL)
        element.compute_all(CalcType.RESIDUAL, info, (1, 10, 0), soln, shp, mate, mate_old,
                            local_r=r)
        element.compute_all(CalcType.JACOBIAN, info, (1, 10, 0), soln, shp, mate, mate_old,
                            local_k=k)
        assert r[4] == SENTINEL
        assert np.all(k[4, :] == SENTINEL)
        assert np.all(k[:, 4] == SENTINEL)

    def test_projection(self, ch_point, shp):
        info, soln, mate, mate_old = ch_point
        proj = MechanicsCahnHilliardElement().compute_all(CalcType.PROJECTION, info, (1, 0, 0),
                                                          soln, shp, mate, mate_old)
        assert proj['concentration'] == 0.4
        assert proj['mu_local'] == mate.scalar('mu')
        assert set(proj) >= {'reacforce_x', 'reacforce_y', 'f'}


class TestMechanicsElement:
    """Tests for MechanicsElement through the reference driver."""

    @pytest.fixture
    def triangle(self):
        return np.array([[0.0, 0.0], [1.0, 0.1], [0.2, 0.9]])

    @pytest.fixture
    def tetrahedron(self):
        return np.array([[0.0, 0.0, 0.0], [1.0, 0.1, 0.0],
                         [0.1, 0.9, 0.1], [0.2, 0.1, 1.1]])

    @pytest.mark.parametrize("n_dim", [2, 3])
    def test_stiffness_symmetric(self, n_dim, triangle, tetrahedron):
        nodes = triangle if n_dim == 2 else tetrahedron
        assembler = ElementAssembler(MechanicsElement(), LinearElasticMaterial(),
                                     [1.0, 0.3], n_dim)
        u = np.zeros((n_dim + 1, n_dim))
        K = assembler.evaluate(nodes, u).jacobian
        assert np.allclose(K, K.T)
        eigenvalues = np.linalg.eigvalsh(K)
        # rigid body modes: 3 in 2-D, 6 in 3-D
        n_rigid = 3 if n_dim == 2 else 6
        assert np.sum(np.abs(eigenvalues) < 1e-10) == n_rigid
        assert np.all(eigenvalues > -1e-10)

    def test_projection_matches_residual(self, triangle):
        assembler = ElementAssembler(MechanicsElement(), LinearElasticMaterial(), [1.0, 0.3], 2)
        u = np.array([[0.0, 0.0], [0.01, 0.002], [-0.003, 0.02]])
        result = assembler.evaluate(triangle, u)
        for I in range(3):
            assert np.isclose(result.projection[I]['reacforce_x'], result.residual[2 * I])
            assert np.isclose(result.projection[I]['reacforce_y'], result.residual[2 * I + 1])

    def test_two_dimensional_guard(self, shp):
        """A 2-D mechanics kernel leaves the z row and column of a 3-D buffer untouched."""
        material = LinearElasticMaterial()
        params = material.setup([1.0, 0.3])
        info, soln, mate, mate_old = gauss_point(material, params, [0.0, 0.0],
                                                 [[0.01, 0.002], [0.004, -0.005]])
        element = MechanicsElement()
        r = np.full(3, SENTINEL)
        k = np.full((3, 3), SENTINEL)
        element.compute_all(CalcType.RESIDUAL, info, (1, 0, 0), soln, shp, mate, mate_old,
                            local_r=r)
        element.compute_all(CalcType.JACOBIAN, info, (1, 0, 0), soln, shp, mate, mate_old,
                            local_k=k)
        assert r[2] == SENTINEL
        assert np.all(k[2, :] == SENTINEL)
        assert np.all(k[:, 2] == SENTINEL)
        assert np.all(r[:2] != SENTINEL)
        assert np.all(k[:2, :2] != SENTINEL)


class TestPairing:
    """Tests for setup-time key pairing."""

    def test_compatible(self):
        check_pairing(MechanicsElement(), LinearElasticMaterial())
        check_pairing(MieheFractureElement(), MieheFractureMaterial())
        check_pairing(MechanicsCahnHilliardElement(), ElasticCahnHilliardMaterial())

    def test_missing_keys(self):
        with pytest.raises(ConfigurationError, match='Gc'):
            check_pairing(MieheFractureElement(), LinearElasticMaterial())

    def test_assembler_checks_pairing(self):
        with pytest.raises(ConfigurationError):
            ElementAssembler(MechanicsCahnHilliardElement(), MieheFractureMaterial(),
                             [1.0, 0.3, 1e-2, 0.2, 0.0], 2)


class TestRegistry:
    """Tests for the element factory."""

    def test_create(self):
        assert isinstance(create_element('miehe_fracture'), MieheFractureElement)
        assert isinstance(create_element(ElementKind.MECHANICS), MechanicsElement)

    def test_n_dofs(self):
        assert create_element('mechanics').n_dofs(2) == 2
        assert create_element('miehe_fracture').n_dofs(3) == 4
        assert create_element('mechanics_cahn_hilliard').n_dofs(2) == 4

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match='Unknown element kind'):
            create_element('phase_field')
