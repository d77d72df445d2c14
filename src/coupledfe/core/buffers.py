"""
Local Buffers
=============

1-based views over caller-owned residual/Jacobian arrays.

The caller allocates and initializes the arrays; a kernel writes only the
entries of the block it owns. Entries it does not write keep whatever value
the caller put there, which is what the dimensional guard relies on.
"""

import logging
import numpy as np

from .errors import raise_logged

logger = logging.getLogger(__name__)


class LocalResidual:
    """
    Residual view, ``r[i]`` addresses dof ``i`` (1-based).

    Args:
        data: caller-owned array of shape (n_dofs,)
        n_dofs: expected number of local dofs
    """

    def __init__(self, data: np.ndarray, n_dofs: int):
        if not isinstance(data, np.ndarray) or data.shape != (n_dofs,):
            shape = getattr(data, 'shape', None)
            raise_logged(logger, f"residual buffer must have shape ({n_dofs},), got {shape}")
        if not data.flags.writeable:
            raise_logged(logger, "residual buffer is read-only")
        self.data = data
        self.n_dofs = n_dofs

    def _index(self, i: int) -> int:
        if not 1 <= i <= self.n_dofs:
            raise_logged(logger, f"residual index {i} out of range 1..{self.n_dofs}", IndexError)
        return i - 1

    def __getitem__(self, i: int) -> float:
        return self.data[self._index(i)]

    def __setitem__(self, i: int, value: float):
        self.data[self._index(i)] = value


class LocalJacobian:
    """
    Jacobian view, ``k[i, j]`` addresses (row dof i, column dof j), 1-based.

    Args:
        data: caller-owned array of shape (n_dofs, n_dofs)
        n_dofs: expected number of local dofs
    """

    def __init__(self, data: np.ndarray, n_dofs: int):
        if not isinstance(data, np.ndarray) or data.shape != (n_dofs, n_dofs):
            shape = getattr(data, 'shape', None)
            raise_logged(
                logger,
                f"jacobian buffer must have shape ({n_dofs}, {n_dofs}), got {shape}")
        if not data.flags.writeable:
            raise_logged(logger, "jacobian buffer is read-only")
        self.data = data
        self.n_dofs = n_dofs

    def _index(self, ij) -> tuple:
        i, j = ij
        if not (1 <= i <= self.n_dofs and 1 <= j <= self.n_dofs):
            raise_logged(logger, f"jacobian index ({i}, {j}) out of range 1..{self.n_dofs}",
                         IndexError)
        return i - 1, j - 1

    def __getitem__(self, ij) -> float:
        return self.data[self._index(ij)]

    def __setitem__(self, ij, value: float):
        self.data[self._index(ij)] = value
