"""
Tension-Compression Split
=========================

Split of the elastic strain energy into a tensile part, which is degraded by
damage, and a compressive part, which is not.

Each split returns the energies, the stresses and the tangents of both parts
so that the fracture material can build a consistent Jacobian:

    ψ = ψ⁺ + ψ⁻,   σ± = ∂ψ±/∂ε,   C± = ∂σ±/∂ε
"""

import numpy as np
from dataclasses import dataclass

from ..tensors import RankTwoTensor, RankFourTensor

# relative gap below which two principal strains are treated as equal
EIGEN_TOL = 1e-12


@dataclass(frozen=True)
class SplitResult:
    """Energies, stresses and tangents of the tensile (+) and compressive (-) parts."""
    psi_pos: float
    psi_neg: float
    stress_pos: RankTwoTensor
    stress_neg: RankTwoTensor
    jacobian_pos: RankFourTensor
    jacobian_neg: RankFourTensor


def _ramp_pos(x: float) -> float:
    return x if x > 0 else 0.0


def _heaviside(x: float) -> float:
    return 1.0 if x > 0 else 0.0


def no_split(strain: RankTwoTensor, lame_lambda: float, lame_mu: float) -> SplitResult:
    """Whole energy is tensile (isotropic degradation)."""
    C = RankFourTensor.isotropic(lame_lambda, lame_mu)
    stress = C.double_dot(strain)
    return SplitResult(
        psi_pos=0.5 * stress.double_dot(strain),
        psi_neg=0.0,
        stress_pos=stress,
        stress_neg=RankTwoTensor.zeros(),
        jacobian_pos=C,
        jacobian_neg=RankFourTensor.zeros(),
    )


def positive_projection(strain: RankTwoTensor):
    """
    Spectral positive part of a symmetric strain tensor and its derivative.

        ε⁺ = Σ_a <ε_a>₊ n_a ⊗ n_a

    The derivative P⁺ = ∂ε⁺/∂ε follows the divided-difference form

        P⁺_ijkl = Σ_ab θ_ab n_a,i n_b,j ½(n_a,k n_b,l + n_b,k n_a,l)

    with θ_ab = (<ε_a>₊ - <ε_b>₊)/(ε_a - ε_b) for distinct eigenvalues and
    θ_ab = H(ε_a) for coincident ones.

    Returns:
        eps_pos: RankTwoTensor
        P_pos: RankFourTensor (minor symmetric)
    """
    eigenvalues, vectors = strain.eigen()
    ramp = np.array([_ramp_pos(lam) for lam in eigenvalues])

    eps_pos = np.einsum('a,ia,ja->ij', ramp, vectors, vectors)

    theta = np.zeros((3, 3))
    scale = max(1.0, np.max(np.abs(eigenvalues)))
    for a in range(3):
        for b in range(3):
            gap = eigenvalues[a] - eigenvalues[b]
            if abs(gap) <= EIGEN_TOL * scale:
                theta[a, b] = _heaviside(eigenvalues[a])
            else:
                theta[a, b] = (ramp[a] - ramp[b]) / gap

    P = np.einsum('ab,ia,jb,ka,lb->ijkl', theta, vectors, vectors, vectors, vectors)
    P = 0.5 * (P + P.transpose(0, 1, 3, 2))
    return RankTwoTensor(eps_pos), RankFourTensor(P)


def spectral_split(strain: RankTwoTensor, lame_lambda: float, lame_mu: float) -> SplitResult:
    """
    Spectral split of Miehe et al. (2010).

        ψ⁺ = ½λ<tr(ε)>₊² + μ ε⁺:ε⁺
        σ⁺ = λ<tr(ε)>₊ I + 2μ ε⁺
        C⁺ = λ H(tr(ε)) I⊗I + 2μ P⁺

    The compressive parts are the remainders of the full isotropic response.
    """
    I = RankTwoTensor.identity()
    ixi = I.otimes(I)
    C = RankFourTensor.isotropic(lame_lambda, lame_mu)

    tr = strain.trace()
    eps_pos, P_pos = positive_projection(strain)

    psi_total = 0.5 * C.double_dot(strain).double_dot(strain)
    psi_pos = 0.5 * lame_lambda * _ramp_pos(tr) ** 2 + lame_mu * eps_pos.double_dot(eps_pos)

    stress_total = C.double_dot(strain)
    stress_pos = lame_lambda * _ramp_pos(tr) * I + 2.0 * lame_mu * eps_pos
    jacobian_pos = lame_lambda * _heaviside(tr) * ixi + 2.0 * lame_mu * P_pos

    return SplitResult(
        psi_pos=psi_pos,
        psi_neg=psi_total - psi_pos,
        stress_pos=stress_pos,
        stress_neg=stress_total - stress_pos,
        jacobian_pos=jacobian_pos,
        jacobian_neg=C - jacobian_pos,
    )


def volumetric_deviatoric_split(strain: RankTwoTensor, lame_lambda: float,
                                lame_mu: float) -> SplitResult:
    """
    Volumetric-deviatoric split of Amor et al. (2009).

        ψ⁺ = ½K<tr(ε)>₊² + μ ε_dev:ε_dev
        ψ⁻ = ½K<tr(ε)>₋²

    Only compressive volume change is protected from degradation.
    """
    K = lame_lambda + 2.0 * lame_mu / 3.0
    I = RankTwoTensor.identity()
    ixi = I.otimes(I)
    dev_projector = RankFourTensor.symmetric_identity() - (1.0 / 3.0) * ixi

    tr = strain.trace()
    tr_pos = _ramp_pos(tr)
    tr_neg = tr - tr_pos
    eps_dev = strain.dev()

    return SplitResult(
        psi_pos=0.5 * K * tr_pos ** 2 + lame_mu * eps_dev.double_dot(eps_dev),
        psi_neg=0.5 * K * tr_neg ** 2,
        stress_pos=K * tr_pos * I + 2.0 * lame_mu * eps_dev,
        stress_neg=K * tr_neg * I,
        jacobian_pos=K * _heaviside(tr) * ixi + 2.0 * lame_mu * dev_projector,
        jacobian_neg=K * _heaviside(-tr) * ixi,
    )


SPLITS = {
    0: no_split,
    1: spectral_split,
    2: volumetric_deviatoric_split,
}
