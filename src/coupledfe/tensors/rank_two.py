"""
Rank-2 Tensor
=============

Immutable 3x3 tensor value with 1-based component access.
"""

import numpy as np
from typing import Tuple


class RankTwoTensor:
    """
    Second-order tensor in 3-D (2-D problems leave the z-parts at zero).

    Components are read with 1-based indices, ``T(1, 2)`` is T_xy.
    Every operation returns a new tensor; the wrapped array is read-only.

    Attributes:
        array: read-only (3, 3) numpy array
    """

    __slots__ = ('_data',)

    def __init__(self, data=None):
        arr = np.zeros((3, 3)) if data is None else np.array(data, dtype=np.float64)
        if arr.shape != (3, 3):
            raise ValueError(f"RankTwoTensor needs shape (3, 3), got {arr.shape}")
        arr.flags.writeable = False
        self._data = arr

    @classmethod
    def zeros(cls) -> 'RankTwoTensor':
        return cls()

    @classmethod
    def identity(cls) -> 'RankTwoTensor':
        return cls(np.eye(3))

    @classmethod
    def from_rows(cls, *rows) -> 'RankTwoTensor':
        """
        Build a tensor whose i-th row is the i-th given vector.

        Rows shorter than 3 are zero padded, missing rows are zero, so the
        gradients of a 2-D displacement field give a 2-D displacement gradient.
        """
        arr = np.zeros((3, 3))
        for i, row in enumerate(rows):
            row = np.asarray(row, dtype=np.float64).ravel()
            arr[i, :row.size] = row
        return cls(arr)

    @property
    def array(self) -> np.ndarray:
        return self._data

    def __call__(self, i: int, j: int) -> float:
        if not (1 <= i <= 3 and 1 <= j <= 3):
            raise IndexError(f"component ({i}, {j}) out of range, indices are 1-based")
        return float(self._data[i - 1, j - 1])

    def ith_row(self, i: int) -> np.ndarray:
        """Return row i (1-based) as a new 3-vector."""
        if not 1 <= i <= 3:
            raise IndexError(f"row {i} out of range, indices are 1-based")
        return self._data[i - 1].copy()

    # ------------------------------------------------------------------
    # algebra
    # ------------------------------------------------------------------
    def __add__(self, other: 'RankTwoTensor') -> 'RankTwoTensor':
        return RankTwoTensor(self._data + other._data)

    def __sub__(self, other: 'RankTwoTensor') -> 'RankTwoTensor':
        return RankTwoTensor(self._data - other._data)

    def __neg__(self) -> 'RankTwoTensor':
        return RankTwoTensor(-self._data)

    def __mul__(self, scalar: float) -> 'RankTwoTensor':
        return RankTwoTensor(self._data * float(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'RankTwoTensor':
        return RankTwoTensor(self._data / float(scalar))

    def __matmul__(self, other):
        """Single contraction with a tensor (A·B) or a vector (A·v)."""
        if isinstance(other, RankTwoTensor):
            return RankTwoTensor(self._data @ other._data)
        return self._data @ np.asarray(other, dtype=np.float64)

    def __eq__(self, other) -> bool:
        return isinstance(other, RankTwoTensor) and np.array_equal(self._data, other._data)

    def __hash__(self):
        return hash(self._data.tobytes())

    def __repr__(self) -> str:
        return f"RankTwoTensor({self._data.tolist()})"

    def transpose(self) -> 'RankTwoTensor':
        return RankTwoTensor(self._data.T)

    def trace(self) -> float:
        return float(np.trace(self._data))

    def det(self) -> float:
        return float(np.linalg.det(self._data))

    def sym(self) -> 'RankTwoTensor':
        """Symmetric part ½(A + Aᵀ)."""
        return RankTwoTensor(0.5 * (self._data + self._data.T))

    def dev(self) -> 'RankTwoTensor':
        """Deviatoric part A - tr(A)/3 I."""
        return RankTwoTensor(self._data - self.trace() / 3.0 * np.eye(3))

    def double_dot(self, other: 'RankTwoTensor') -> float:
        """A : B = A_ij B_ij."""
        return float(np.tensordot(self._data, other._data, axes=2))

    def otimes(self, other: 'RankTwoTensor'):
        """Dyadic product (A ⊗ B)_ijkl = A_ij B_kl."""
        from .rank_four import RankFourTensor
        return RankFourTensor(np.einsum('ij,kl->ijkl', self._data, other._data))

    def eigen(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Eigen-decomposition of the symmetric part.

        Returns:
            eigenvalues: ascending, shape (3,)
            eigenvectors: columns are the principal directions, shape (3, 3)
        """
        return np.linalg.eigh(0.5 * (self._data + self._data.T))

    def von_mises(self) -> float:
        """Von Mises equivalent √(3/2 s:s) of the deviatoric part."""
        s = self.dev()
        return float(np.sqrt(1.5 * s.double_dot(s)))
