"""
Material Bag
============

String-keyed collection of constitutive quantities at one Gauss point.

Four typed slots exist: scalar, vector, rank-2 and rank-4. Two bags live per
Gauss point: the current iterate and the previous converged step. Kernels only
read frozen bags; a missing key always raises instead of defaulting.
"""

import copy
import logging
import numpy as np
from typing import Dict, Iterable, Mapping

from .errors import raise_logged
from ..tensors import RankTwoTensor, RankFourTensor

logger = logging.getLogger(__name__)

SLOTS = ('scalar', 'vector', 'rank2', 'rank4')


class MaterialBag:
    """
    Keyed bag of scalar, vector, rank-2 and rank-4 material properties.

    Attributes:
        scalars: dict of float
        vectors: dict of read-only 3-vectors
        rank2: dict of RankTwoTensor
        rank4: dict of RankFourTensor
        frozen: True once the producing material has finished
    """

    def __init__(self):
        self.scalars: Dict[str, float] = {}
        self.vectors: Dict[str, np.ndarray] = {}
        self.rank2: Dict[str, RankTwoTensor] = {}
        self.rank4: Dict[str, RankFourTensor] = {}
        self.frozen = False

    def _check_writable(self, key: str):
        if self.frozen:
            raise_logged(logger, f"cannot set '{key}': material bag is frozen")

    # ------------------------------------------------------------------
    # setters
    # ------------------------------------------------------------------
    def set_scalar(self, key: str, value: float) -> None:
        self._check_writable(key)
        self.scalars[key] = float(value)

    def set_vector(self, key: str, value) -> None:
        self._check_writable(key)
        vec = np.array(value, dtype=np.float64).ravel()
        if vec.shape != (3,):
            raise_logged(logger, f"vector '{key}' must have 3 components, got {vec.shape}")
        vec.flags.writeable = False
        self.vectors[key] = vec

    def set_rank2(self, key: str, value: RankTwoTensor) -> None:
        self._check_writable(key)
        if not isinstance(value, RankTwoTensor):
            raise_logged(logger, f"'{key}' must be a RankTwoTensor")
        self.rank2[key] = value

    def set_rank4(self, key: str, value: RankFourTensor) -> None:
        self._check_writable(key)
        if not isinstance(value, RankFourTensor):
            raise_logged(logger, f"'{key}' must be a RankFourTensor")
        self.rank4[key] = value

    # ------------------------------------------------------------------
    # getters
    # ------------------------------------------------------------------
    @staticmethod
    def _lookup(store: Mapping, key: str, slot: str):
        if key not in store:
            raise_logged(
                logger,
                f"material property '{key}' not found in {slot} slot "
                f"(available: {sorted(store)})")
        return store[key]

    def scalar(self, key: str) -> float:
        return self._lookup(self.scalars, key, 'scalar')

    def vector(self, key: str) -> np.ndarray:
        return self._lookup(self.vectors, key, 'vector')

    def rank_two(self, key: str) -> RankTwoTensor:
        return self._lookup(self.rank2, key, 'rank2')

    def rank_four(self, key: str) -> RankFourTensor:
        return self._lookup(self.rank4, key, 'rank4')

    # ------------------------------------------------------------------
    def keys(self) -> Dict[str, frozenset]:
        """Return the key set of every slot."""
        return {
            'scalar': frozenset(self.scalars),
            'vector': frozenset(self.vectors),
            'rank2': frozenset(self.rank2),
            'rank4': frozenset(self.rank4),
        }

    def require(self, required: Mapping[str, Iterable[str]]) -> None:
        """
        Check that every required key is present.

        Args:
            required: mapping slot name -> iterable of keys
        """
        missing = missing_keys(required, self.keys())
        if missing:
            raise_logged(logger, f"material bag is missing {missing}")

    def freeze(self) -> 'MaterialBag':
        self.frozen = True
        return self

    def copy(self) -> 'MaterialBag':
        """Deep, unfrozen copy."""
        new = MaterialBag()
        new.scalars = dict(self.scalars)
        new.vectors = copy.deepcopy(self.vectors)
        new.rank2 = dict(self.rank2)
        new.rank4 = dict(self.rank4)
        return new

    def __eq__(self, other) -> bool:
        if not isinstance(other, MaterialBag) or self.keys() != other.keys():
            return False
        return (self.scalars == other.scalars
                and all(np.array_equal(v, other.vectors[k]) for k, v in self.vectors.items())
                and all(v == other.rank2[k] for k, v in self.rank2.items())
                and all(v == other.rank4[k] for k, v in self.rank4.items()))

    def __repr__(self) -> str:
        return f"MaterialBag({ {s: sorted(k) for s, k in self.keys().items()} })"


def missing_keys(required: Mapping[str, Iterable[str]],
                 provided: Mapping[str, Iterable[str]]) -> Dict[str, list]:
    """
    Compare required and provided key sets slot by slot.

    Returns:
        dict slot -> sorted list of missing keys (empty dict if none)
    """
    missing = {}
    for slot, keys in required.items():
        if slot not in SLOTS:
            raise_logged(logger, f"unknown material slot '{slot}'")
        absent = set(keys) - set(provided.get(slot, ()))
        if absent:
            missing[slot] = sorted(absent)
    return missing
