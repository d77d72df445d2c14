"""
Rank-4 Tensor
=============

Immutable 3x3x3x3 tensor value, used for elasticity operators.
"""

import numpy as np

from .rank_two import RankTwoTensor


class RankFourTensor:
    """
    Fourth-order tensor in 3-D with 1-based component access ``C(i, j, k, l)``.

    Attributes:
        array: read-only (3, 3, 3, 3) numpy array
    """

    __slots__ = ('_data',)

    def __init__(self, data=None):
        arr = np.zeros((3, 3, 3, 3)) if data is None else np.array(data, dtype=np.float64)
        if arr.shape != (3, 3, 3, 3):
            raise ValueError(f"RankFourTensor needs shape (3, 3, 3, 3), got {arr.shape}")
        arr.flags.writeable = False
        self._data = arr

    @classmethod
    def zeros(cls) -> 'RankFourTensor':
        return cls()

    @classmethod
    def identity(cls) -> 'RankFourTensor':
        """I_ijkl = δ_ik δ_jl, so that I : A = A."""
        d = np.eye(3)
        return cls(np.einsum('ik,jl->ijkl', d, d))

    @classmethod
    def symmetric_identity(cls) -> 'RankFourTensor':
        """I^sym_ijkl = ½(δ_ik δ_jl + δ_il δ_jk), so that I^sym : A = sym(A)."""
        d = np.eye(3)
        return cls(0.5 * (np.einsum('ik,jl->ijkl', d, d) + np.einsum('il,jk->ijkl', d, d)))

    @classmethod
    def isotropic(cls, lame_lambda: float, lame_mu: float) -> 'RankFourTensor':
        """
        Isotropic elasticity tensor.

        C = λ I⊗I + 2μ I^sym
        """
        d = np.eye(3)
        ixi = np.einsum('ij,kl->ijkl', d, d)
        return cls(lame_lambda * ixi + 2.0 * lame_mu * cls.symmetric_identity().array)

    @property
    def array(self) -> np.ndarray:
        return self._data

    def __call__(self, i: int, j: int, k: int, l: int) -> float:
        if not all(1 <= n <= 3 for n in (i, j, k, l)):
            raise IndexError(f"component ({i}, {j}, {k}, {l}) out of range, indices are 1-based")
        return float(self._data[i - 1, j - 1, k - 1, l - 1])

    def get_ik_jl_component(self, i: int, k: int,
                            grad_test: np.ndarray, grad_trial: np.ndarray) -> float:
        """
        Contract with test and trial gradients with i and k fixed.

        Returns:
            Σ_jl C_ijkl · grad_test_j · grad_trial_l  (i, k 1-based)
        """
        if not (1 <= i <= 3 and 1 <= k <= 3):
            raise IndexError(f"component ({i}, {k}) out of range, indices are 1-based")
        return float(np.asarray(grad_test) @ self._data[i - 1, :, k - 1, :] @ np.asarray(grad_trial))

    def double_dot(self, other: RankTwoTensor) -> RankTwoTensor:
        """(C : A)_ij = C_ijkl A_kl."""
        return RankTwoTensor(np.tensordot(self._data, other.array, axes=2))

    def __add__(self, other: 'RankFourTensor') -> 'RankFourTensor':
        return RankFourTensor(self._data + other._data)

    def __sub__(self, other: 'RankFourTensor') -> 'RankFourTensor':
        return RankFourTensor(self._data - other._data)

    def __neg__(self) -> 'RankFourTensor':
        return RankFourTensor(-self._data)

    def __mul__(self, scalar: float) -> 'RankFourTensor':
        return RankFourTensor(self._data * float(scalar))

    __rmul__ = __mul__

    def __eq__(self, other) -> bool:
        return isinstance(other, RankFourTensor) and np.array_equal(self._data, other._data)

    def __hash__(self):
        return hash(self._data.tobytes())

    def __repr__(self) -> str:
        return f"RankFourTensor(norm={np.linalg.norm(self._data):.6g})"
