"""
Tests for Materials Module
==========================
"""

import logging
import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from coupledfe.core import (
    ElementInfo, ElementSolution, ConfigurationError, ComputationError,
)
from coupledfe.tensors import RankTwoTensor, RankFourTensor
from coupledfe.materials import (
    ElasticParams, LinearElasticMaterial, MieheFractureMaterial,
    ElasticCahnHilliardMaterial, free_energy, create_material, MaterialKind,
    no_split, spectral_split, volumetric_deviatoric_split, positive_projection,
)


def make_solution(u, grads):
    """Gauss-point solution from field values and (n_dofs, 2|3) gradients."""
    u = np.asarray(u, dtype=float)
    grad_u = np.zeros((u.size, 3))
    grads = np.asarray(grads, dtype=float)
    grad_u[:, :grads.shape[1]] = grads
    return ElementSolution(gp_u=u, gp_v=np.zeros(u.size), gp_grad_u=grad_u)


def evaluate(material, params, info, soln, mate_old=None):
    if mate_old is None:
        mate_old = material.init_material_properties(params, info, soln)
    return material.compute_material_properties(params, info, soln, mate_old)


STRAINS = [
    RankTwoTensor([[0.02, 0.005, 0.0], [0.005, -0.01, 0.003], [0.0, 0.003, 0.005]]),
    RankTwoTensor([[-0.01, 0.002, 0.0], [0.002, -0.02, 0.0], [0.0, 0.0, 0.004]]),
    RankTwoTensor([[0.03, -0.01, 0.0], [-0.01, 0.01, 0.0], [0.0, 0.0, 0.0]]),
]


class TestElasticParams:
    """Tests for parameter validation."""

    def test_lame_constants(self):
        p = ElasticParams(E=210e3, nu=0.3)
        assert np.isclose(p.lame_mu, 210e3 / 2.6)
        assert np.isclose(p.lame_lambda, 210e3 * 0.3 / (1.3 * 0.4))
        assert np.isclose(p.bulk_modulus, p.lame_lambda + 2 * p.lame_mu / 3)

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            ElasticParams(E=-1.0, nu=0.3)
        with pytest.raises(ConfigurationError):
            ElasticParams(E=1.0, nu=0.5)

    def test_parameter_count(self):
        mat = LinearElasticMaterial()
        with pytest.raises(ConfigurationError, match='linear_elastic'):
            mat.setup([1.0])
        with pytest.raises(ConfigurationError):
            mat.setup([1.0, 0.3, 5.0])

    def test_range_error_names_kind(self):
        with pytest.raises(ConfigurationError, match='miehe_fracture'):
            MieheFractureMaterial().setup([1.0, 0.3, -1.0, 0.1, 0.0])

    def test_miehe_needs_viscosity(self):
        with pytest.raises(ConfigurationError):
            MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2])

    def test_miehe_split_flag(self):
        params = MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2, 0.0, 2])
        assert params.split == 2
        assert params.k == 0.0
        with pytest.raises(ConfigurationError):
            MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2, 0.0, 5])
        with pytest.raises(ConfigurationError):
            MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2, 0.0, 1.5])

    @pytest.mark.parametrize("value", [np.nan, np.inf])
    def test_non_finite_flag(self, value):
        with pytest.raises(ConfigurationError, match="miehe_fracture: parameter 'split'"):
            MieheFractureMaterial().setup([1.0, 0.3, 1.0, 1.0, 0.0, value])

    def test_non_finite_value(self):
        with pytest.raises(ConfigurationError, match="linear_elastic: parameter 'E'"):
            LinearElasticMaterial().setup([np.nan, 0.3])

    def test_rejections_are_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger='coupledfe'):
            with pytest.raises(ConfigurationError):
                MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2])
            with pytest.raises(ConfigurationError):
                ElasticCahnHilliardMaterial().setup([1.0, 0.3, 1.0, 1e-2, 2.5])
            with pytest.raises(ConfigurationError):
                MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2, 0.0, 1.5])
            with pytest.raises(ConfigurationError):
                MieheFractureMaterial().setup([1.0, 0.3, 1e-2, 0.2, 0.0, np.nan])
        messages = [rec.getMessage() for rec in caplog.records if rec.levelno == logging.ERROR]
        assert len(messages) == 4
        assert messages[1].startswith('elastic_cahn_hilliard: ')
        assert all(msg.startswith(('miehe_fracture: ', 'elastic_cahn_hilliard: '))
                   for msg in messages)

    def test_cahn_hilliard_params(self):
        params = ElasticCahnHilliardMaterial().setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05])
        assert params.finite == 0
        with pytest.raises(ConfigurationError):
            ElasticCahnHilliardMaterial().setup([1.0, 0.3, 1.0, 1e-2, 2.5])
        with pytest.raises(ConfigurationError):
            ElasticCahnHilliardMaterial().setup([1.0, 0.3, 0.0, 1e-2, 2.5, 0.05])

    def test_unvalidated_params_rejected(self):
        mat = LinearElasticMaterial()
        info = ElementInfo(n_dim=2)
        soln = make_solution([0.0, 0.0], np.zeros((2, 2)))
        with pytest.raises(ConfigurationError):
            mat.init_material_properties([1.0, 0.3], info, soln)


class TestLinearElastic:
    """Tests for LinearElasticMaterial."""

    @pytest.fixture
    def material(self):
        return LinearElasticMaterial()

    @pytest.fixture
    def params(self, material):
        return material.setup([1.0, 0.3])

    def test_uniaxial_strain(self, material, params):
        """ε_xx only: σ_xx = (λ+2μ)ε, σ_yy = σ_zz = λε."""
        eps = 0.01
        info = ElementInfo(n_dim=2)
        soln = make_solution([0.0, 0.0], [[eps, 0.0], [0.0, 0.0]])
        bag = evaluate(material, params, info, soln)
        stress = bag.rank_two('stress')
        lam, mu = params.lame_lambda, params.lame_mu
        assert np.isclose(stress(1, 1), (lam + 2 * mu) * eps)
        assert np.isclose(stress(2, 2), lam * eps)
        assert np.isclose(stress(3, 3), lam * eps)
        assert np.isclose(stress(1, 2), 0.0)
        assert np.isclose(bag.scalar('psi'), 0.5 * (lam + 2 * mu) * eps ** 2)

    def test_rotation_is_stress_free(self, material, params):
        info = ElementInfo(n_dim=2)
        soln = make_solution([0.0, 0.0], [[0.0, -0.01], [0.01, 0.0]])
        bag = evaluate(material, params, info, soln)
        assert np.allclose(bag.rank_two('stress').array, 0.0)

    def test_bags_frozen_and_complete(self, material, params):
        info = ElementInfo(n_dim=2)
        soln = make_solution([0.0, 0.0], np.zeros((2, 2)))
        init = material.init_material_properties(params, info, soln)
        assert init.frozen
        init.require(material.provides)
        assert init.rank_four('jacobian') == params.elasticity_tensor()


class TestTensionSplit:
    """Tests for the energy splits."""

    @pytest.mark.parametrize("split", [no_split, spectral_split, volumetric_deviatoric_split])
    @pytest.mark.parametrize("strain", STRAINS)
    def test_parts_sum_to_total(self, split, strain):
        lam, mu = 0.6, 0.4
        C = RankFourTensor.isotropic(lam, mu)
        result = split(strain, lam, mu)
        stress = C.double_dot(strain)
        assert np.isclose(result.psi_pos + result.psi_neg, 0.5 * stress.double_dot(strain))
        assert np.allclose((result.stress_pos + result.stress_neg).array, stress.array)
        assert np.allclose((result.jacobian_pos + result.jacobian_neg).array, C.array)
        assert result.psi_pos >= 0.0
        assert result.psi_neg >= -1e-15

    @pytest.mark.parametrize("split", [spectral_split, volumetric_deviatoric_split])
    def test_pure_compression_not_degraded(self, split):
        strain = -0.01 * RankTwoTensor.identity()
        result = split(strain, 0.6, 0.4)
        assert np.isclose(result.psi_pos, 0.0)
        assert np.allclose(result.stress_pos.array, 0.0)

    def test_spectral_pure_tension_fully_degraded(self):
        strain = RankTwoTensor(np.diag([0.01, 0.02, 0.005]))
        result = spectral_split(strain, 0.6, 0.4)
        assert np.isclose(result.psi_neg, 0.0)
        assert np.allclose(result.stress_neg.array, 0.0)

    @pytest.mark.parametrize("strain", STRAINS[:2])
    def test_positive_projection_tangent(self, strain):
        """P⁺ matches the finite-difference derivative of ε⁺."""
        _, P = positive_projection(strain)
        h = 1e-7
        for k in range(3):
            for l in range(3):
                delta = np.zeros((3, 3))
                delta[k, l] += 0.5 * h
                delta[l, k] += 0.5 * h
                plus, _ = positive_projection(strain + RankTwoTensor(delta))
                minus, _ = positive_projection(strain - RankTwoTensor(delta))
                fd = (plus.array - minus.array) / (2 * h)
                assert np.allclose(P.array[:, :, k, l], fd, atol=1e-6)

    @pytest.mark.parametrize("split", [spectral_split, volumetric_deviatoric_split])
    def test_stress_is_energy_derivative(self, split):
        strain = STRAINS[0]
        result = split(strain, 0.6, 0.4)
        h = 1e-7
        for k in range(3):
            for l in range(k, 3):
                delta = np.zeros((3, 3))
                delta[k, l] += 0.5 * h
                delta[l, k] += 0.5 * h
                dpsi = (split(strain + RankTwoTensor(delta), 0.6, 0.4).psi_pos
                        - split(strain - RankTwoTensor(delta), 0.6, 0.4).psi_pos) / (2 * h)
                assert np.isclose(dpsi, result.stress_pos(k + 1, l + 1), atol=1e-7)


class TestMieheFracture:
    """Tests for MieheFractureMaterial."""

    @pytest.fixture
    def material(self):
        return MieheFractureMaterial()

    @pytest.fixture
    def params(self, material):
        return material.setup([1.0, 0.3, 1e-2, 0.2, 1e-2])

    @pytest.fixture
    def info(self):
        return ElementInfo(n_dim=2, dt=0.1)

    def tension(self, d, scale=1.0):
        grads = scale * np.array([[0.0, 0.0], [0.05, 0.01], [0.0, -0.01]])
        return make_solution([d, 0.0, 0.0], grads)

    def test_init(self, material, params, info):
        bag = material.init_material_properties(params, info, self.tension(0.0))
        assert bag.frozen
        assert bag.scalar('H') == 0.0
        assert bag.scalar('Gc') == 1e-2
        assert bag.rank_four('jacobian') == params.elasticity_tensor()

    def test_history_grows_with_tension(self, material, params, info):
        soln = self.tension(0.2)
        bag = evaluate(material, params, info, soln)
        assert bag.scalar('H') > 0.0
        assert bag.scalar('H') == bag.scalar('psi_pos')
        assert bag.rank_two('dHdstrain') != RankTwoTensor.zeros()

    def test_history_irreversible(self, material, params, info):
        loaded = evaluate(material, params, info, self.tension(0.2))
        unloaded = evaluate(material, params, info, self.tension(0.2, scale=0.1), loaded)
        assert unloaded.scalar('H') == loaded.scalar('H')
        assert unloaded.rank_two('dHdstrain') == RankTwoTensor.zeros()
        assert unloaded.scalar('psi_pos') < loaded.scalar('H')

    def test_repeated_evaluation_identical(self, material, params, info):
        """The bag is a pure function of the kinematics and the old bag."""
        old = evaluate(material, params, info, self.tension(0.1, scale=0.5))
        first = evaluate(material, params, info, self.tension(0.2), old)
        second = evaluate(material, params, info, self.tension(0.2), old)
        assert first == second

    def test_degradation(self, material, params, info):
        intact = evaluate(material, params, info, self.tension(0.0))
        damaged = evaluate(material, params, info, self.tension(0.5))
        g = 0.25
        split = spectral_split(intact.rank_two('strain'), params.lame_lambda, params.lame_mu)
        expected = g * split.stress_pos + split.stress_neg
        assert np.allclose(damaged.rank_two('stress').array, expected.array)
        assert np.allclose(damaged.rank_two('dstressdD').array, (-1.0 * split.stress_pos).array)
        assert np.isclose(damaged.scalar('psi'), g * split.psi_pos + split.psi_neg)

    def test_strain_excludes_damage_gradient(self, material, params, info):
        soln = make_solution([0.1, 0.0, 0.0], [[5.0, 5.0], [0.01, 0.0], [0.0, 0.0]])
        bag = evaluate(material, params, info, soln)
        assert np.isclose(bag.rank_two('strain')(1, 1), 0.01)
        assert np.isclose(bag.rank_two('strain')(1, 2), 0.0)


class TestCahnHilliard:
    """Tests for ElasticCahnHilliardMaterial."""

    @pytest.fixture
    def material(self):
        return ElasticCahnHilliardMaterial()

    @pytest.fixture
    def params(self, material):
        return material.setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05])

    @pytest.fixture
    def info(self):
        return ElementInfo(n_dim=2, elmt_id=3, gp_id=1)

    @pytest.mark.parametrize("c", [0.1, 0.4, 0.75])
    def test_free_energy_derivatives(self, c):
        h = 1e-6
        f, df, d2f = free_energy(c, 2.5)
        assert np.isclose(df, (free_energy(c + h, 2.5)[0] - free_energy(c - h, 2.5)[0]) / (2 * h),
                          atol=1e-6)
        assert np.isclose(d2f, (free_energy(c + h, 2.5)[1] - free_energy(c - h, 2.5)[1]) / (2 * h),
                          atol=1e-5)

    @pytest.mark.parametrize("c", [0.0, 1.0, -0.2, 1.3])
    def test_free_energy_domain(self, c):
        with pytest.raises(ValueError):
            free_energy(c, 2.5)

    def test_concentration_out_of_range(self, material, params, info):
        soln = make_solution([1.2, 0.0, 0.0, 0.0], np.zeros((4, 2)))
        with pytest.raises(ComputationError) as excinfo:
            material.compute_material_properties(
                params, info, soln,
                material.init_material_properties(params, info, soln))
        assert excinfo.value.key == 'free_energy'
        assert excinfo.value.elmt_id == 3
        assert excinfo.value.gp_id == 1

    def test_free_swelling_chemical_potential(self, material, params, info):
        """Clamped body: μ_loc = f'(c) + 3ω²c(3λ+2μ)."""
        c = 0.4
        soln = make_solution([c, 0.0, 0.0, 0.0], np.zeros((4, 2)))
        bag = evaluate(material, params, info, soln)
        three_k = 3 * params.lame_lambda + 2 * params.lame_mu
        _, df, d2f = free_energy(c, params.chi)
        assert np.isclose(bag.scalar('mu'), df + 3 * params.omega ** 2 * c * three_k)
        assert np.isclose(bag.scalar('dmudc'), d2f + 3 * params.omega ** 2 * three_k)
        assert np.allclose(bag.rank_two('stress').array, -params.omega * c * three_k * np.eye(3))

    def test_dmudc_matches_finite_difference(self, material, params, info):
        grads = np.array([[0.1, 0.0], [0.0, 0.0], [0.02, 0.01], [0.0, -0.01]])
        h = 1e-7

        def mu(c):
            return evaluate(material, params, info, make_solution([c, 0.0, 0.0, 0.0], grads)).scalar('mu')

        bag = evaluate(material, params, info, make_solution([0.45, 0.0, 0.0, 0.0], grads))
        assert np.isclose(bag.scalar('dmudc'), (mu(0.45 + h) - mu(0.45 - h)) / (2 * h), rtol=1e-6)

    def test_finite_strain_reduces_to_small_strain(self, material, info):
        small = material.setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05, 0])
        finite = material.setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05, 1])
        grads = 1e-6 * np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 0.5], [0.2, -1.0]])
        soln = make_solution([0.5, 0.0, 0.0, 0.0], grads)
        a = evaluate(material, small, info, soln)
        b = evaluate(material, finite, info, soln)
        assert np.allclose(a.rank_two('stress').array, b.rank_two('stress').array, atol=1e-6)
        assert np.isclose(a.scalar('mu'), b.scalar('mu'))

    def test_inverted_element(self, material, info):
        params = material.setup([1.0, 0.3, 1.0, 1e-2, 2.5, 0.05, 1])
        soln = make_solution([0.5, 0.0, 0.0, 0.0], [[0, 0], [0, 0], [-2.0, 0.0], [0.0, 0.0]])
        with pytest.raises(ComputationError) as excinfo:
            evaluate(material, params, info, soln)
        assert excinfo.value.key == 'deformation_gradient'


class TestRegistry:
    """Tests for the material factory."""

    @pytest.mark.parametrize("kind, cls", [
        ("linear_elastic", LinearElasticMaterial),
        ("miehe_fracture", MieheFractureMaterial),
        (MaterialKind.ELASTIC_CAHN_HILLIARD, ElasticCahnHilliardMaterial),
    ])
    def test_create(self, kind, cls):
        assert isinstance(create_material(kind), cls)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match='Unknown material kind'):
            create_material('neo_hookean')
